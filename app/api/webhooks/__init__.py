from app.api.webhooks import pbxware_voice, twilio_voice

__all__ = ["pbxware_voice", "twilio_voice"]
