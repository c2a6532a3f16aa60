from convote.models.activity_log import ActivityLog
from convote.models.choice import Choice
from convote.models.meeting import Meeting
from convote.models.motion import Motion, MotionStatus
from convote.models.pool import Pool
from convote.models.quorum_snapshot import QuorumSnapshot, QuorumSnapshotVoter
from convote.models.system_setting import SystemSetting
from convote.models.user import User, user_pools
from convote.models.vote import Vote, VoteChoice

__all__ = [
    "User",
    "Pool",
    "user_pools",
    "Meeting",
    "Motion",
    "MotionStatus",
    "Choice",
    "Vote",
    "VoteChoice",
    "ActivityLog",
    "QuorumSnapshot",
    "QuorumSnapshotVoter",
    "SystemSetting",
]
