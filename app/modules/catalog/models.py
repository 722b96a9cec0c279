# Supabase table: products
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

products:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- unit_price: decimal(10,2) (not null)
- stock_quantity: integer (default: 0)
- min_stock_level: integer (default: 10) - low stock when stock_quantity <= min_stock_level
- sku: text (unique, not null) - generated as SKU-<6 digits>-<3 chars> when not supplied
- image_url: text (nullable)
- status: text (default: 'active') - values: active, inactive
- supplier_id: uuid (foreign key to suppliers.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
