"""Editing Session Example for rulegraph.

This example walks through the edits a node editor performs on a pricing
rule:
- Parsing an expression into a node store
- Adding a decision branch and wrapping an operand
- Copy/paste of a subtree and undo/redo
- Mapping an evaluator trace back onto the nodes

Run it from the repository root:
    python examples/editing_session.py
"""

import json
from pathlib import Path

from rich.console import Console

import rulegraph as rg
from rulegraph._cli.render import render_store_tree

console = Console()

# -----------------------------------------------------------------------------
# Load the rule
# -----------------------------------------------------------------------------

rule = json.loads((Path(__file__).parent / "rules" / "discount.json").read_text())
session = rg.EditorSession.from_expression(rule)
root = session.store.root
assert root is not None

console.rule("Parsed rule")
render_store_tree(session.store, console)

# -----------------------------------------------------------------------------
# Structural edits
# -----------------------------------------------------------------------------

# A new condition/then pair lands before the else branch
pair = session.add_argument(root.id)
condition_id = pair.node_id
assert condition_id is not None

# Replace the default condition with a check on the coupon code
session.insert_node_on_edge(root.id, condition_id, "__variable__")
variable = session.selection.primary(session.store)
assert variable is not None
session.update_variable(variable, path="order.coupon")

# Guard the VIP price against negative totals
vip_price = session.store.children(root.id)[1]
session.wrap_in_operator(vip_price.id, "abs")

console.rule("After edits")
console.print_json(data=session.expression)

# -----------------------------------------------------------------------------
# Clipboard and history
# -----------------------------------------------------------------------------

session.copy(session.store.children(root.id)[1].id)
session.paste(session.store.children(root.id)[5].id)
console.rule("After paste")
console.print_json(data=session.expression)

while session.undo():
    pass
console.rule("After undoing everything")
console.print_json(data=session.expression)

# -----------------------------------------------------------------------------
# Evaluator trace
# -----------------------------------------------------------------------------

trace = rg.ExpressionNode(
    id=0,
    expression=json.dumps(rg.project_store(session.store)),
    children=[
        rg.ExpressionNode(id=1, expression='{"var":"customer.vip"}'),
        rg.ExpressionNode(id=2, expression='{"*":[{"var":"order.total"},0.8]}'),
    ],
)
mapping = rg.map_trace_to_store(trace, session.store, root.id)
console.rule("Trace mapping")
for trace_id, node_id in sorted(mapping.items()):
    console.print(f"trace node {trace_id} -> {session.store[node_id].kind} {node_id[:8]}")
