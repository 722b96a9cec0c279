"""
Access Policy Configuration
This config defines, for every marketplace table, which rule governs each
operation. Rule names are resolved to predicates by app.modules.policy.engine.
An operation mapped to None is denied for every caller.
"""

# Tables and their ownership column
TABLES = {
    "user_roles": {
        "owner_column": "user_id",
        "description": "Role and approval status per account"
    },
    "supplier_profiles": {
        "owner_column": "user_id",
        "description": "Supplier business/display profile"
    },
    "vendor_profiles": {
        "owner_column": "user_id",
        "description": "Vendor company/display profile"
    },
    "suppliers": {
        "owner_column": "user_id",
        "description": "Supplier business record referenced by products and orders"
    },
    "products": {
        "owner_column": None,  # owned through suppliers.user_id
        "description": "Catalog items"
    },
    "orders": {
        "owner_column": "user_id",  # purchaser
        "description": "Purchase orders"
    },
}

# Unique constraints enforced by the storage layer
UNIQUE_CONSTRAINTS = {
    "user_roles": [("user_id",)],
    "supplier_profiles": [("user_id",)],
    "vendor_profiles": [("user_id",)],
    "suppliers": [("user_id",)],
    "products": [("sku",)],
    "orders": [],
}

# Rule names and what they require
RULES = {
    "anyone": "Any caller",
    "owner": "Caller owns the row",
    "owner_or_superadmin": "Caller owns the row or is an approved superadmin",
    "self_or_superadmin": "Row belongs to the caller or caller is an approved superadmin",
    "superadmin": "Caller is an approved superadmin",
    "supplier_owner": "Caller owns the supplier record the row references",
    "purchaser_or_supplier": "Caller placed the order or owns the supplier record it references",
    "pending_purchaser_or_supplier": "Caller placed the still-pending order or owns its supplier record",
    "role_derivation": "Caller owns the row and it matches the sign-up derivation rule",
}

# Rule per table and operation. "update_check" is applied to the row as it
# would be after an update and defaults to the "update" rule.
TABLE_POLICIES = {
    "supplier_profiles": {
        "read": "owner_or_superadmin",
        "insert": "owner",
        "update": "owner",
        "delete": None,
    },
    "vendor_profiles": {
        "read": "owner_or_superadmin",
        "insert": "owner",
        "update": "owner",
        "delete": None,
    },
    "suppliers": {
        "read": "anyone",
        "insert": "owner",
        "update": "owner",
        "delete": None,
    },
    "products": {
        "read": "anyone",
        "insert": "supplier_owner",
        "update": "supplier_owner",
        "delete": "supplier_owner",
    },
    "orders": {
        "read": "purchaser_or_supplier",
        "insert": "owner",
        "update": "pending_purchaser_or_supplier",
        "update_check": "purchaser_or_supplier",  # applied to the patched row
        "delete": None,
    },
    "user_roles": {
        "read": "self_or_superadmin",
        "insert": "role_derivation",
        "update": "superadmin",
        "delete": None,
    },
}


def get_policy_matrix():
    """
    Returns the policy matrix with rule descriptions, for admin tooling.
    Format: {
        "products": {
            "read": {"rule": "anyone", "description": "Any caller"},
            ...
        },
        ...
    }
    """
    matrix = {}
    for table, operations in TABLE_POLICIES.items():
        matrix[table] = {}
        for operation, rule in operations.items():
            matrix[table][operation] = {
                "rule": rule,
                "description": RULES[rule] if rule else "Denied for every caller",
            }
    return matrix
