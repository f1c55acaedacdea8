"""Release actions offered by the release tool, in the order they are listed."""

from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.publish.actions.configure_next_as_major import ConfigureNextAsMajorAction
from ng_dev.release.publish.actions.cut_lts_patch import CutLongTermSupportPatchAction
from ng_dev.release.publish.actions.cut_new_patch import CutNewPatchAction
from ng_dev.release.publish.actions.cut_next_prerelease import CutNextPrereleaseAction
from ng_dev.release.publish.actions.cut_release_candidate import CutReleaseCandidateAction
from ng_dev.release.publish.actions.cut_stable import CutStableAction
from ng_dev.release.publish.actions.move_next_into_feature_freeze import MoveNextIntoFeatureFreezeAction
from ng_dev.release.publish.actions.tag_recent_major_as_latest import TagRecentMajorAsLatest

ACTIONS: list[type[ReleaseAction]] = [
    TagRecentMajorAsLatest,
    CutStableAction,
    CutReleaseCandidateAction,
    CutNewPatchAction,
    CutNextPrereleaseAction,
    MoveNextIntoFeatureFreezeAction,
    ConfigureNextAsMajorAction,
    CutLongTermSupportPatchAction,
]

__all__ = ["ACTIONS", "ReleaseAction"]
