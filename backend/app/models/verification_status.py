import enum


class VerificationStatus(str, enum.Enum):
    """Manual vetting stage shared by artists and salons."""
    UNVERIFIED = "unverified"
    SCRAPED = "scraped"
    CONTACTED = "contacted"
    ONBOARDING = "onboarding"
    VERIFIED = "verified"
