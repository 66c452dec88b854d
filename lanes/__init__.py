# Lanes board: personal tasks grouped into colour-coded lanes
#
# Components:
#   schema.py      - Data model (Task, Category, palette, uncategorized lane)
#   slots.py       - SQLite key-value persistence, one slot per record sequence
#   store.py       - TaskStore and CategoryStore (ordered in-memory sequences)
#   views.py       - Derived views: totals, lanes, relative date labels
#   interaction.py - Transient UI state (tabs, edit slots, context menu)
#   board.py       - Top-level application state wiring it all together
#   config.py      - YAML configuration with env overrides
