# Supabase table: orders
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

orders:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null) - purchaser
- product_id: uuid (foreign key to products.id, not null)
- supplier_id: uuid (foreign key to suppliers.id, not null)
- quantity: integer (not null, > 0)
- unit_price: decimal(10,2) (not null) - locked from the product at order time
- total_amount: decimal(10,2) (not null) - quantity * unit_price at order time
- status: text (default: 'pending') - values: pending, confirmed, shipped, delivered, cancelled
- order_date: timestamp (default: now())
- expected_delivery: timestamp (nullable)
- notes: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

status moves pending -> confirmed -> shipped -> delivered (supplier, one step
at a time) or pending -> cancelled (purchaser). See workflow.py.
"""
