"""Outlook Feature Extractor package.

Objective:
    Turn an Outlook mailbox into a labeled feature table for machine-learning
    use, and optionally score selected rows against a remote prediction
    service:
    - Walk the mailbox folder tree and derive one feature record per message.
    - Serialize the records into a comma-delimited table.
    - Send a fixed subset of features to a scoring endpoint and merge the
      returned predictions into a second table.

Key modules:
    - :mod:`src.outlook_features.mailbox` / :mod:`src.outlook_features.graph_mailbox`:
        Mailbox adapters (JSON snapshot, Microsoft Graph).
    - :mod:`src.outlook_features.features`:
        Per-message feature rules.
    - :mod:`src.outlook_features.walker`:
        Depth-first folder traversal with per-item failure isolation.
    - :mod:`src.outlook_features.dataset` / :mod:`src.outlook_features.table`:
        Record accumulation and table encoding.
    - :mod:`src.outlook_features.scoring` / :mod:`src.outlook_features.predictor`:
        Remote scoring client and prediction merge.
    - :mod:`src.outlook_features.orchestrator`:
        End-to-end workflow coordination.
    - :mod:`src.outlook_features.cli`:
        User-facing entrypoint.
"""

__version__ = "0.1.0"
