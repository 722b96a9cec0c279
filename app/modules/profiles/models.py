# Supabase tables: supplier_profiles, vendor_profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

supplier_profiles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null)
- full_name: text (nullable)
- business_name: text (nullable)
- business_type: text (nullable)
- business_address: text (nullable)
- contact_number: text (nullable)
- fssai_license: text (nullable)
- other_certifications: text[] (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

vendor_profiles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null)
- full_name: text (nullable)
- company_name: text (nullable)
- contact_number: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Which table holds an account's profile is decided by user_roles.role.
Superadmins have no profile row.
"""
