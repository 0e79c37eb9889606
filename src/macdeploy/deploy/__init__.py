"""ZeroTier deployment pipeline with cooperative cancellation and rollback."""

from macdeploy.deploy.cancellation import CancellationToken, RollbackPlan
from macdeploy.deploy.sequencer import DeploymentSequencer

__all__ = ["CancellationToken", "DeploymentSequencer", "RollbackPlan"]
