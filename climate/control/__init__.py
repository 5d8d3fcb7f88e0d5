# climate/control/__init__.py
"""
Control loop for the climate controller.

Modules:
- climate_controller: State machine, mutators and status queries
- hysteresis: Standard and eco start/stop bands
- eco_mode: Band selection and eco savings counters
- settings: Controller parameters and energy constants
- scheduler: Background thread calling tick() every period
"""
