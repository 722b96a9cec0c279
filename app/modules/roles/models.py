# Supabase table: user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null) - one assignment per account
- role: text (not null) - values: supplier, vendor, superadmin
- approval_status: text (not null, default: 'pending') - values: pending, approved, rejected
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Rows are never deleted. approval_status only changes through a superadmin
update (see approval.py for the allowed transitions).
"""
