"""
Action and resource names used by the service layer, plus the default
permission catalogue seeded on startup
"""

# Actions
READ = "read"
CREATE = "create"
UPDATE = "update"
DELETE = "delete"
ASSIGN = "assign"

# Resources
HOTEL = "hotel"
ROOM = "room"
BOOKING = "booking"
USER = "user"
ROLE = "role"
PERMISSION = "permission"
REPORT = "report"

CRUD_ACTIONS = (READ, CREATE, UPDATE, DELETE)

# (action, resource) pairs created by the seed
DEFAULT_PERMISSIONS = (
    [(a, HOTEL) for a in CRUD_ACTIONS]
    + [(a, ROOM) for a in CRUD_ACTIONS]
    + [(a, BOOKING) for a in CRUD_ACTIONS]
    + [(a, USER) for a in CRUD_ACTIONS]
    + [(a, ROLE) for a in CRUD_ACTIONS]
    + [(ASSIGN, ROLE)]
    + [(a, PERMISSION) for a in CRUD_ACTIONS]
    + [(READ, REPORT)]
)

# Global roles created by the seed; superadmin needs no grants
ADMIN_ROLE = "admin"
ADMIN_PERMISSIONS = [
    (CREATE, HOTEL),
    (READ, USER),
    (READ, ROLE),
    (READ, PERMISSION),
]


def permission_label(action: str, resource: str) -> str:
    """Display name, e.g. ("create", "room") -> "room_create" """
    return f"{resource}_{action}"
