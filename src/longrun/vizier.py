"""Type URLs of Vertex AI Vizier operation payloads."""

from __future__ import annotations

from longrun.types import TYPE_URL_PREFIX

_V1 = f"{TYPE_URL_PREFIX}google.cloud.aiplatform.v1"

SUGGEST_TRIALS_RESPONSE = f"{_V1}.SuggestTrialsResponse"
SUGGEST_TRIALS_METADATA = f"{_V1}.SuggestTrialsMetadata"
CHECK_TRIAL_EARLY_STOPPING_STATE_RESPONSE = (
    f"{_V1}.CheckTrialEarlyStoppingStateResponse"
)
# Misspelled in the published proto.
CHECK_TRIAL_EARLY_STOPPING_STATE_METADATA = (
    f"{_V1}.CheckTrialEarlyStoppingStateMetatdata"
)
