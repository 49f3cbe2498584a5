"""Role and permission names used by the policy catalogue. Names are compared case-sensitively."""

ADMIN = "ADMIN"
HR = "HR"
PM = "PM"
USER = "USER"

VIEW_ADMIN_ROLES = "VIEW_ADMIN_ROLES"
MANAGE_ROLES = "MANAGE_ROLES"
