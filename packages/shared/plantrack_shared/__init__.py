"""Pydantic schemas shared by the PlanTrack server and its clients."""
