"""
Real HTTP integration clients.

These clients communicate with the Safaricom Daraja API:
- OAuth token generation
- Lipa na M-Pesa Online (STK push) submission

Important:
- Must implement the same interfaces as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs real clients should happen in src/api/main.py only.
"""
