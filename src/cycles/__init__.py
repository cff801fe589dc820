"""Flow Index cycle engine.

Pure functions that turn a user's daily logs into menstrual cycles and
predictions.  No I/O; storage, auth and the AI service are collaborators.

Modules:
    dates         — ISO calendar-date helpers
    segmenter     — Daily logs → cycles (newest first)
    estimator     — Weighted moving average "smart" cycle length
    regularity    — 0–100 regularity score
    projector     — Future period / fertile / ovulation calendar markers
    phase         — Today's cycle day and phase
    analysis      — Cycle history, metric trends, symptom frequency, insight context
    tracker       — CycleTracker facade over the pipeline
    store         — Storage ABC, in-memory store, CycleService
    config_loader — Load/validate/hot-reload cycle_config.yaml

Import from the modules directly.  Nothing is re-exported here because
``src.models.tracking`` imports ``src.cycles.dates``.
"""
