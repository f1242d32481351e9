# apps/travel_planner/app/graph.py

from langgraph.graph import StateGraph, END
from .state import CreateItineraryState
from .nodes import validate_segments, create_itinerary, create_segments

def should_continue(state: CreateItineraryState) -> str:
    return "end" if state.get("validation_errors") else "continue"

workflow = StateGraph(CreateItineraryState)

# Add Nodes
workflow.add_node("validate_segments", validate_segments)
workflow.add_node("create_itinerary", create_itinerary)
workflow.add_node("create_segments", create_segments)

# Set Entry Point
workflow.set_entry_point("validate_segments")

# Edges
# Nothing is written unless every segment validated.
workflow.add_conditional_edges(
    "validate_segments",
    should_continue,
    {"continue": "create_itinerary", "end": END}
)
workflow.add_edge("create_itinerary", "create_segments")
workflow.add_edge("create_segments", END)

create_itinerary_flow = workflow.compile()
