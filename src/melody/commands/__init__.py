"""Command handlers for the interactive prompt and one-shot CLI.

Every handler takes the AppContext (plus parsed arguments) and returns
``(context, should_continue)``.
"""
