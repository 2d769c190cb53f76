"""
Motion-sensor ingestion and dead-reckoning package for Android recordings.

Modules:
    - config: constants & tunable parameters, YAML loading.
    - errors: exception hierarchy shared by every layer.
    - log_setup: console/file logging for CLI entry points.
    - models: sensor enums, values, events and the kinematic state.
    - platform: platform sensor service contract and in-memory platform.
    - binding: ownership of sensor handles and the event channel.
    - decoder: raw hardware record decoding and non-blocking draining.
    - series: bounded, debounced, low-pass filtered history per sensor.
    - store: one filtered series per tracked sensor type.
    - estimator: trapezoidal integration of acceleration.
    - runtime: lifecycle and per-tick entry points for the host.
    - replay: plays recorded sessions back as raw hardware records.
    - plotting: position/velocity figures.
    - run_replay: CLI entry point for replaying recorded sessions.
"""
