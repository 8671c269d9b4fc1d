"""
proxyswitch interactive terminal UI — ``src/proxyswitch/ui/``.

``state`` and ``render`` are pure Python (no Textual import) and hold all of
the navigation, viewport and layout logic.  ``engine`` drives them from
events and hands directory calls to a background runner; ``app`` is the thin
Textual shell around the engine.

Entry point::

    from proxyswitch.ui.app import run
    run(config)
"""
