from typing import Dict, List

# Default permissions per staff role. Only the fee-related names are
# checked by this service; the rest travel with the token unchanged.
DEFAULT_PERMISSIONS: Dict[str, List[str]] = {
    "super_admin": [
        "view_dashboard",
        "manage_students",
        "manage_courses",
        "manage_fees",
        "view_fees",
        "manage_accounts",
        "manage_receipts",
        "view_receipts",
        "view_reports",
        "export_data",
    ],
    "accountant": [
        "view_dashboard",
        "manage_fees",
        "view_fees",
        "manage_accounts",
        "view_accounts",
        "manage_receipts",
        "view_receipts",
        "view_financial_reports",
        "export_financial_data",
        "view_reports",
    ],
    "teacher": [
        "view_dashboard",
        "view_students",
        "view_courses",
        "view_fees",
        "view_student_fees",
        "view_reports",
    ],
    "office_staff": [
        "view_dashboard",
        "manage_students",
        "view_reports",
        "manage_communications",
        "view_courses",
    ],
}


def has_permission(role: str, permission: str) -> bool:
    return permission in DEFAULT_PERMISSIONS.get(role, [])
