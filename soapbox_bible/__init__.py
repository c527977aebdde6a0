"""SoapBox Bible verse store."""
