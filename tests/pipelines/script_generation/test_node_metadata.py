"""
Tests for node metadata - every field a node reads is run configuration or
written by an earlier node.
"""

from viralscripts.pipelines.metadata import NodeMetadata, describe_nodes, get_node_metadata
from viralscripts.pipelines.script_generation.models import PipelineOptions
from viralscripts.pipelines.script_generation.orchestrator import PIPELINE_NODES


def _field(name):
    return name.split(".")[0]


class TestNodeMetadata:

    def test_every_node_declares_metadata(self):
        for node_class in PIPELINE_NODES:
            assert isinstance(get_node_metadata(node_class), NodeMetadata), node_class.__name__

    def test_data_flow_is_consistent(self):
        known = set(PipelineOptions.model_fields) | {"model_id"}

        for node_class in PIPELINE_NODES:
            meta = node_class.metadata
            own_outputs = {_field(o) for o in meta.outputs}
            for name in meta.inputs:
                assert _field(name) in known | own_outputs, f"{node_class.__name__} reads {name}"
            known |= own_outputs

    def test_llm_nodes_explain_purpose(self):
        for node_class in PIPELINE_NODES:
            meta = node_class.metadata
            if meta.uses_llm:
                assert meta.llm_purpose, node_class.__name__

    def test_describe_nodes_in_graph_order(self):
        plan = describe_nodes(PIPELINE_NODES)

        assert [entry["node"] for entry in plan][0] == "InitializeNode"
        assert plan[-1]["node"] == "FinalizeNode"
        assert plan[1]["stage"] == "corpus_retrieval"
        assert plan[2]["uses_llm"] is True

    def test_describe_nodes_without_metadata(self):
        class Bare:
            pass

        assert describe_nodes([Bare]) == [{"node": "Bare"}]
