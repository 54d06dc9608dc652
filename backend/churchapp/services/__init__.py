"""
ChurchApp Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and the ORM (persistence).
How:   Services take an AsyncSession per call and only flush; the request's
       session dependency owns the commit. Module-level singletons are
       imported by the routes.

Service Inventory:
    - AuthService / AdminAuthService: credential checks and token issuing
    - PermissionService: permission catalog, grant and revoke
    - FinanceService: branch ledger and summary
    - PositionService: church positions, default seeding, guarded deletion
    - ChurchService / BranchService: onboarding and branch management
    - MemberService: members and the role hierarchy
    - EventService / ContributionService / DevotionalService: branch content
    - UploadService: image validation and storage
    - plan_service: plan resolution and member/branch limits
    - AdminService: platform admin listings
"""
