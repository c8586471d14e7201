"""Pipeline components — one class per orchestration concern.

Leaf-first: ``WorkspaceSync`` -> ``FeedRegistry`` -> ``OverrideResolver``
-> ``RootfsOverlay`` -> ``ConfigApplier`` -> ``BuildExecutor`` ->
(``FailureTriage`` | ``ArtifactLocator``).  External tools are reached only
through the ``CommandRunner`` Protocol, except the build itself, whose
output ``BuildExecutor`` streams directly.
"""
