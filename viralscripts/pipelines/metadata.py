"""
Node Metadata for pipeline introspection.

Each script-generation node declares which state fields it reads and
writes, the services it calls and the Claude tier it uses. The CLI uses
this to print the stage plan for a run, and tests use it to check that the
graph's data flow is consistent (every field a node reads is written by an
earlier node or is run configuration).

Usage:
    @dataclass
    class ExpandScriptsNode(BaseNode[ScriptPipelineState]):
        metadata: ClassVar[NodeMetadata] = NodeMetadata(
            inputs=["hooks", "corpus_matches"],
            outputs=["expanded_scripts"],
            services=["expansion.expand_scripts"],
            llm="Claude Sonnet",
            llm_purpose="Expand hooks into full scripts",
        )
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class NodeMetadata:
    """
    Static description of one pipeline node.

    Attributes:
        inputs: State fields read by this node
        outputs: State fields written by this node
        services: Service methods called (e.g., "hooks.generate_hooks")
        llm: Claude tier used, if any
        llm_purpose: What the LLM does in this node
        stage: PipelineStage value reported to callbacks
    """

    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    services: List[str] = field(default_factory=list)
    llm: Optional[str] = None
    llm_purpose: Optional[str] = None
    stage: Optional[str] = None

    @property
    def uses_llm(self) -> bool:
        return self.llm is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputs": self.inputs,
            "outputs": self.outputs,
            "services": self.services,
            "llm": self.llm,
            "llm_purpose": self.llm_purpose,
            "stage": self.stage,
            "uses_llm": self.uses_llm,
        }


def get_node_metadata(node_class) -> Optional[NodeMetadata]:
    """Return a node class's metadata, or None if it declares none."""
    return getattr(node_class, "metadata", None)


def describe_nodes(node_classes: Iterable[type]) -> List[Dict[str, Any]]:
    """
    Summarize a sequence of node classes in graph order.

    Returns:
        One dict per node with its name plus its metadata fields
    """
    plan = []
    for node_class in node_classes:
        meta = get_node_metadata(node_class)
        entry: Dict[str, Any] = {"node": node_class.__name__}
        if meta is not None:
            entry.update(meta.to_dict())
        plan.append(entry)
    return plan
