# Routes package init
"""
iShop Payments Backend — API Routes Package
=============================================

Route Inventory:
    - payment.py: POST /api/payment/order       (create gateway order)
                  POST /api/payment/verify      (verify and record payment)
                  GET  /api/payment/{order_id}  (recorded payments for an order)
    - health.py:  GET  /health                  (service health check)
"""
