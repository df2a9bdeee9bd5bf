from typing import List, Optional

from ..models.enums import MedicalSpecialization, UserRole
from ..schemas.auth import UserResponse
from ..schemas.views import (
    AuthFormView, FeatureCard, FieldOption, FormField, LandingView, Link
)

SIGN_IN = "sign-in"
SIGN_UP = "sign-up"
AUTH_MODES = (SIGN_IN, SIGN_UP)

FEATURES = [
    FeatureCard(
        title="Expert Doctors",
        description="Connect with certified healthcare professionals across various specializations",
        bullets=["Board-certified physicians", "Multiple specializations available", "Verified credentials"],
    ),
    FeatureCard(
        title="Easy Scheduling",
        description="Book appointments that fit your schedule with our flexible booking system",
        bullets=["24/7 booking availability", "Same-day appointments", "Automatic reminders"],
    ),
    FeatureCard(
        title="Secure & Private",
        description="Your health data is protected with enterprise-grade security measures",
        bullets=["HIPAA compliant platform", "End-to-end encryption", "Secure data storage"],
    ),
    FeatureCard(
        title="24/7 Access",
        description="Access your medical records and communicate with doctors anytime",
    ),
    FeatureCard(
        title="Family Care",
        description="Manage healthcare for your entire family from one convenient platform",
    ),
    FeatureCard(
        title="Comprehensive Care",
        description="From routine check-ups to specialized consultations, we've got you covered",
    ),
]


def build_landing_view(user: Optional[UserResponse]) -> LandingView:
    if user:
        return LandingView(
            user=user,
            nav=[Link(label="Go to Dashboard", href="/dashboard")],
            hero_actions=[],
            features=FEATURES,
        )

    return LandingView(
        nav=[
            Link(label="Sign In", href="/auth", variant="outline"),
            Link(label="Get Started", href=f"/auth?mode={SIGN_UP}"),
        ],
        hero_actions=[
            Link(label="Book Your First Consultation", href=f"/auth?mode={SIGN_UP}&role=patient"),
            Link(label="Join as a Doctor", href=f"/auth?mode={SIGN_UP}&role=doctor", variant="outline"),
        ],
        features=FEATURES,
        cta_action=Link(label="Start Your Healthcare Journey", href=f"/auth?mode={SIGN_UP}", variant="secondary"),
    )


# Auth form
ROLE_TABS = [
    FieldOption(value=UserRole.PATIENT.value, label="Patient"),
    FieldOption(value=UserRole.DOCTOR.value, label="Doctor"),
]

SPECIALIZATION_OPTIONS = [
    FieldOption(value=specialization.value, label=specialization.label)
    for specialization in MedicalSpecialization
]

NAME_FIELDS = [
    FormField(name="first_name", label="First Name", required=True),
    FormField(name="last_name", label="Last Name", required=True),
]

PATIENT_FIELDS = [
    FormField(name="phone", label="Phone Number", type="tel"),
    FormField(name="date_of_birth", label="Date of Birth", type="date", placeholder="Pick a date"),
]

DOCTOR_FIELDS = [
    FormField(name="license_number", label="Medical License Number", required=True),
    FormField(
        name="specialization",
        label="Specialization",
        type="select",
        placeholder="Select your specialization",
        options=SPECIALIZATION_OPTIONS,
    ),
    FormField(name="years_of_experience", label="Years of Experience", type="number"),
    FormField(name="consultation_fee", label="Consultation Fee ($)", type="number"),
    FormField(name="education", label="Education", placeholder="Medical school, residency, etc."),
]

CREDENTIAL_FIELDS = [
    FormField(name="email", label="Email", type="email", required=True),
    FormField(name="password", label="Password", type="password", required=True),
]


def build_auth_form(mode: str = SIGN_IN, role: UserRole = UserRole.PATIENT) -> AuthFormView:
    """Fields of the sign-in or sign-up form; sign-up fields depend on the selected role."""
    if mode not in AUTH_MODES:
        raise ValueError(f"Unknown auth mode: {mode}")

    if mode == SIGN_IN:
        return AuthFormView(
            mode=mode,
            title="Welcome Back",
            description="Sign in to access your healthcare dashboard",
            fields=list(CREDENTIAL_FIELDS),
            submit_label="Sign In",
            submit_url="/api/v1/auth/sign-in",
            toggle=Link(label="Don't have an account? Sign up", href=f"/auth?mode={SIGN_UP}"),
        )

    role_fields: List[FormField] = DOCTOR_FIELDS if role == UserRole.DOCTOR else PATIENT_FIELDS
    return AuthFormView(
        mode=mode,
        title="Create Account",
        description="Join our telemedicine platform today",
        role_tabs=ROLE_TABS,
        selected_role=role.value,
        fields=NAME_FIELDS + role_fields + CREDENTIAL_FIELDS + [
            FormField(name="confirm_password", label="Confirm Password", type="password", required=True),
        ],
        submit_label="Create Account",
        submit_url="/api/v1/auth/sign-up",
        toggle=Link(label="Already have an account? Sign in", href=f"/auth?mode={SIGN_IN}"),
    )
