"""
Permission keys for the dashboard.

Each key gates one section of the dashboard (navigation item) and the API
routes that back it. Keys are kept in the dashboard's own vocabulary so the
frontend can use the login payload as-is.
"""

# Each permission is defined as: (key, name, description)
PERMISSION_DEFINITIONS = [
    (
        "dashboard",
        "Dashboard",
        "Headline metric cards, recent knowledge and alerts",
    ),
    (
        "inventaris",
        "Inventaris",
        "Materials, stock levels, production logs and waste records",
    ),
    (
        "analitik",
        "Analitik",
        "Strategic overview: stock value, vendor reliability, knowledge health, lean efficiency",
    ),
    (
        "vendor",
        "Vendor",
        "Supplier intelligence (KBV), ratings and deliveries",
    ),
    (
        "pengetahuan",
        "Pengetahuan",
        "Lessons learned (SECI) and the knowledge base",
    ),
    (
        "users",
        "Users",
        "Create, update and deactivate user accounts",
    ),
    (
        "settings",
        "Settings",
        "System settings and the role permission table",
    ),
]

PERMISSION_KEYS = tuple(definition[0] for definition in PERMISSION_DEFINITIONS)
