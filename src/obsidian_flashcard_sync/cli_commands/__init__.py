"""CLI command modules for obsidian-flashcard-sync.

- shared.py: config/logger loading, console, settings overrides
- sync_handler.py: sync and connection-check implementation
- core_commands.py: sync, extract, check
- config_commands.py: config show / config set
"""
