"""Upgrade engine — moves content parameters to newer library versions.

- run_serial: ordered, one-at-a-time async iteration
- UpgradeRegistry / run_upgrade_hooks: per-library version hooks
- FieldWalker: finds embedded sub-content through the semantics
- ContentUpgradeProcess / upgrade_content: ties it all together
"""
