import logging
import operator
import shutil
from enum import Enum
from pathlib import Path
from typing import Annotated, Callable, Iterable, List, Optional, TypedDict

from langgraph.graph import END, START, StateGraph

from harvester.config import HarvestConfig
from harvester.errors import AcquisitionError, StageError
from harvester.ingestion.repo_cloner import acquire
from harvester.ingestion.repo_lists import PendingList, ValidatedList
from harvester.models.candidate import RepositoryCandidate, ValidatedRecord, repo_dirname
from harvester.models.report import RunReport
from harvester.validation.maven_runner import build, run_tests
from harvester.validation.structure_checker import StructureChecker

logger = logging.getLogger(__name__)


# --- Stage machine ---

class PipelineStage(str, Enum):
    DISCOVERED = "discovered"
    ACQUIRED = "acquired"
    STRUCTURALLY_VALID = "structurally_valid"
    BUILT = "built"
    TESTED = "tested"
    VALIDATED = "validated"
    REJECTED = "rejected"


NEXT_STAGE = {
    PipelineStage.DISCOVERED: PipelineStage.ACQUIRED,
    PipelineStage.ACQUIRED: PipelineStage.STRUCTURALLY_VALID,
    PipelineStage.STRUCTURALLY_VALID: PipelineStage.BUILT,
    PipelineStage.BUILT: PipelineStage.TESTED,
    PipelineStage.TESTED: PipelineStage.VALIDATED,
}

TERMINAL_STAGES = {PipelineStage.VALIDATED, PipelineStage.REJECTED}


def advance(stage: PipelineStage, passed: bool) -> PipelineStage:
    """
    The only way a candidate moves: one step forward on success, straight to
    REJECTED on failure. Terminal stages have no successor.
    """
    if stage in TERMINAL_STAGES:
        raise ValueError(f"{stage.value} is terminal")
    return NEXT_STAGE[stage] if passed else PipelineStage.REJECTED


# Node that performs the step out of each non-terminal stage
STEP_FOR_STAGE = {
    PipelineStage.DISCOVERED: "acquire",
    PipelineStage.ACQUIRED: "check_structure",
    PipelineStage.STRUCTURALLY_VALID: "build",
    PipelineStage.BUILT: "run_tests",
    PipelineStage.TESTED: "keep",
}


class CandidateState(TypedDict):
    candidate: RepositoryCandidate
    stage: PipelineStage
    local_copy: Optional[Path]
    failed_stage: Optional[str]
    reason: Optional[str]
    attempted: Annotated[List[str], operator.add]  # steps run, in order


def route_next(state: CandidateState) -> str:
    if state["stage"] == PipelineStage.REJECTED:
        return "discard"
    return STEP_FOR_STAGE[state["stage"]]


# --- Coordinator ---

class PipelineCoordinator:
    """
    Drives candidates one at a time through
    acquire -> check_structure -> build -> run_tests -> keep,
    discarding the local copy of any candidate that fails a step.
    """

    def __init__(
        self,
        config: HarvestConfig,
        acquirer: Callable = acquire,
        checker: Optional[StructureChecker] = None,
        builder: Callable = build,
        tester: Callable = run_tests,
    ):
        self.config = config
        self.acquirer = acquirer
        self.checker = checker or StructureChecker(config.java_version, config.test_framework_marker)
        self.builder = builder
        self.tester = tester
        self.validated = ValidatedList(config.validated_list)
        self.pending = PendingList(config.pending_list)
        self.app = self._build_graph()

    def _build_graph(self):
        workflow = StateGraph(CandidateState)

        workflow.add_node("acquire", self.acquire_node)
        workflow.add_node("check_structure", self.structure_node)
        workflow.add_node("build", self.build_node)
        workflow.add_node("run_tests", self.test_node)
        workflow.add_node("keep", self.keep_node)
        workflow.add_node("discard", self.discard_node)

        workflow.add_edge(START, "acquire")
        destinations = ["check_structure", "build", "run_tests", "keep", "discard"]
        for step in ("acquire", "check_structure", "build", "run_tests"):
            workflow.add_conditional_edges(step, route_next, destinations)
        workflow.add_edge("keep", END)
        workflow.add_edge("discard", END)

        return workflow.compile()

    # --- Nodes ---

    def _step(self, state: CandidateState, name: str, action: Callable[[], Optional[Path]]) -> dict:
        try:
            result = action()
        except StageError as e:
            return {
                "stage": advance(state["stage"], False),
                "failed_stage": e.stage,
                "reason": str(e),
                "attempted": [name],
            }
        update = {"stage": advance(state["stage"], True), "attempted": [name]}
        if isinstance(result, Path):
            update["local_copy"] = result
        return update

    def acquire_node(self, state: CandidateState) -> dict:
        candidate = state["candidate"]

        def fetch():
            owner = self._validated_owner(candidate)
            if owner is not None:
                raise AcquisitionError(f"{candidate.dirname} already holds validated repository {owner.name}")
            return self.acquirer(candidate.clone_location, self.config.clone_dir)

        return self._step(state, "acquire", fetch)

    def structure_node(self, state: CandidateState) -> dict:
        return self._step(state, "check_structure", lambda: self.checker.check(state["local_copy"]))

    def build_node(self, state: CandidateState) -> dict:
        return self._step(
            state,
            "build",
            lambda: self.builder(state["local_copy"], timeout=self.config.build_timeout, build_tool=self.config.build_tool),
        )

    def test_node(self, state: CandidateState) -> dict:
        return self._step(
            state,
            "run_tests",
            lambda: self.tester(state["local_copy"], timeout=self.config.test_timeout, build_tool=self.config.build_tool),
        )

    def keep_node(self, state: CandidateState) -> dict:
        candidate = state["candidate"]
        self.validated.append(ValidatedRecord.from_candidate(candidate))
        logger.info(f"Repository {candidate.dirname} successfully validated and kept")
        return {"stage": advance(state["stage"], True), "attempted": ["keep"]}

    def discard_node(self, state: CandidateState) -> dict:
        candidate = state["candidate"]
        logger.warning(f"Rejected {candidate.name} at {state['failed_stage']}: {state['reason']}")

        path = self._removable_copy(state)
        if path is not None and path.exists():
            logger.info(f"Removing failed repository: {path.name}")
            shutil.rmtree(path)
        return {"local_copy": None, "attempted": ["discard"]}

    # --- Helpers ---

    def _validated_owner(self, candidate: RepositoryCandidate) -> Optional[ValidatedRecord]:
        """A different, already validated repository that maps to the same local directory."""
        for record in self.validated.read():
            if record.clone_location != candidate.clone_location and repo_dirname(record.clone_location) == candidate.dirname:
                return record
        return None

    def _removable_copy(self, state: CandidateState) -> Optional[Path]:
        """
        The directory a rejected candidate may delete: its own checkout, which
        must sit directly inside clone_dir and must not hold a kept repository.
        """
        candidate = state["candidate"]
        path = state.get("local_copy")
        if path is None:
            # git may leave a partial checkout behind even when acquisition failed
            if candidate.dirname in ("", ".", ".."):
                return None
            path = Path(self.config.clone_dir) / candidate.dirname

        clone_root = Path(self.config.clone_dir).resolve()
        if path.resolve().parent != clone_root:
            logger.error(f"Refusing to remove {path}: not a repository directory under {clone_root}")
            return None

        owner = self._validated_owner(candidate)
        if owner is not None and repo_dirname(owner.clone_location) == path.name:
            logger.warning(f"Keeping {path.name}: it holds validated repository {owner.name}")
            return None
        return path

    # --- Driving ---

    def process(self, candidate: RepositoryCandidate) -> CandidateState:
        """Run one candidate to a terminal stage and return its final state."""
        logger.info(f"Processing repository: {candidate.name}")
        initial: CandidateState = {
            "candidate": candidate,
            "stage": PipelineStage.DISCOVERED,
            "local_copy": None,
            "failed_stage": None,
            "reason": None,
            "attempted": [],
        }
        return self.app.invoke(initial)

    def run(self, candidates: Iterable[RepositoryCandidate]) -> RunReport:
        candidates = list(candidates)
        self.validated.ensure()
        self.pending.write(candidates)

        report = RunReport()
        for i, candidate in enumerate(candidates, start=1):
            logger.info(f"[{i}/{len(candidates)}] {candidate.clone_location}")
            final = self.process(candidate)
            if final["stage"] == PipelineStage.VALIDATED:
                report.succeeded += 1
            else:
                report.failed += 1
            self.pending.remove(candidate)

        return report
