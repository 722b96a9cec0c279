# Supabase table: suppliers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

suppliers:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null) - the unique
  constraint is what keeps lazy provisioning idempotent under races
- name: text (not null) - copied from supplier_profiles.business_name
- contact_email: text (nullable)
- contact_phone: text (nullable) - copied from supplier_profiles.contact_number
- address: text (nullable) - copied from supplier_profiles.business_address
- logo_url: text (nullable)
- website: text (nullable)
- status: text (default: 'active') - values: active, inactive
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Products and orders reference suppliers.id, not the profile.
"""
