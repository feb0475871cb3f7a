# Services package init
"""
iShop Payments Backend — Services Layer
=========================================

What:  Payment business logic between routes (HTTP) and database (persistence).

Service Inventory:
    - RazorpayClient: order creation against the gateway's REST API
    - signature: HMAC-SHA256 payment signature verification
    - PaymentRecordStore: append-only storage of verified confirmations
    - PaymentService: orchestrates create-order and verify-payment
"""
