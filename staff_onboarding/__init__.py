"""Staff Onboarding Service.

Backs the employer / employee onboarding wizard: form validation,
document uploads to hosted storage, and Claude Vision checks for
visa photos and passport pages.
"""
