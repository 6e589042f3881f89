"""
Mock integration clients.

These clients return fake (but realistic) Daraja responses without calling
any external API. They are used when:
- Daraja credentials are not configured
- We want to exercise the payment flow end-to-end without the network

Important:
- Mock clients must follow the SAME interface as real HTTP clients.

Switching to real:
Set CONSUMER_KEY / CONSUMER_SECRET / SHORTCODE / PASSKEY (or
INTEGRATIONS_MODE=real) and src/api/main.py wires the real_http clients.
"""
