"""Telephony adapters."""

from .twilio_client import TelephonyError, TwilioCallPlacer, build_twiml

__all__ = ["TelephonyError", "TwilioCallPlacer", "build_twiml"]
