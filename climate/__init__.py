"""
Home climate controller simulation.

Core components:
- Sensor provider (simulated temperature, humidity and CO readings)
- Shared climate state guarded by a reader/writer lock
- Control loop with hysteresis and eco-mode bands
- Energy accounting (final and periodic flushes)
"""
