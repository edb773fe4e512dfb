"""
MQTT telemetry ingestion: durable message log, broker subscriber, history API.
"""
