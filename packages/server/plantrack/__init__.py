"""PlanTrack server: organization-scoped inspection tracking API."""
