"""
Contracts (data models).

This folder defines the request/response shapes for the payment gateway
integration and the payment records we keep about it.

Both mock and real HTTP clients should use these contracts.
"""
