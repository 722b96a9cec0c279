# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new accounts
- auth.sign_in_with_password() - Authenticate accounts
- auth.get_user() - Resolve the caller identity from a JWT
- auth.sign_out() - Logout

The account id from auth.users is the user_id every marketplace table
(user_roles, supplier_profiles, vendor_profiles, suppliers, orders) is keyed by.
Role and approval state are NOT kept in user metadata; they live in
user_roles so the policy layer can look them up on every request.
"""
