# accounts/permission_defaults.py

ROLE_PERMISSIONS = {
    # super-admin is also allowed everything implicitly (see ActorContext.has)
    "super-admin": {
        # Platform
        "tenants.view",
        "tenants.manage",
        "users.view",
        "users.manage",
        "roles.assign",

        # Employers & jobs
        "employers.view",
        "employers.verify",
        "jobs.view",
        "jobs.approve",

        # Analytics
        "analytics.view",
        "analytics.generate",
        "analytics.export",

        # Dashboards
        "dashboard.super_admin",
    },
    "institution-admin": {
        "tenants.view",

        # Graduates
        "graduates.view",
        "graduates.manage",
        "courses.view",
        "courses.manage",
        "applications.view",

        # Analytics
        "analytics.view",
        "analytics.generate",
        "analytics.export",

        # Themes
        "themes.view",
        "themes.manage",

        "jobs.view",
        "dashboard.institution_admin",
    },
    "graduate": {
        "jobs.view",
        "applications.create",
        "applications.view_own",
        "profile.manage_own",
        "courses.view",
        "themes.view",
        "dashboard.graduate",
    },
    "employer": {
        "jobs.view",
        "jobs.manage_own",
        "applications.review",
        "graduates.search",
        "employer_profile.manage",
        "dashboard.employer",
    },
}


def permissions_for_role(role: str) -> set[str]:
    return set(ROLE_PERMISSIONS.get(role, set()))


def all_permission_codes() -> set[str]:
    codes: set[str] = set()
    for s in ROLE_PERMISSIONS.values():
        codes |= set(s)
    return codes
