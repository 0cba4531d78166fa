"""Workflow step state machine.

The operator walks a linear sequence of steps; each state's value is
the step number shown in the UI. Steps only move forward, except
``reset`` which is legal from anywhere and returns to step 1.

Work for a step is done *before* its transition fires, so a failed
operation leaves the machine where it was. ``check_transition`` lets the
controller reject an illegal operation before doing any work.
"""

from __future__ import annotations

from statemachine import State, StateMachine


class WorkflowSM(StateMachine):
    """Six-step operator workflow.

    States (value = step number):
        awaiting_script    -- 1: nothing entered yet.
        script_entered     -- 2: script accepted, shotlist not generated.
        shotlist_generated -- 3: people extracted, not yet searched.
        provider_searched  -- 4: Getty results available, nothing selected.
        selection_made     -- 5: at least one item has been selected.
        exported           -- 6: a CSV export has been compiled.
    """

    awaiting_script = State("awaiting_script", initial=True, value=1)
    script_entered = State("script_entered", value=2)
    shotlist_generated = State("shotlist_generated", value=3)
    provider_searched = State("provider_searched", value=4)
    selection_made = State("selection_made", value=5)
    exported = State("exported", value=6)

    submit_script = awaiting_script.to(script_entered)
    generate_shotlist = script_entered.to(shotlist_generated)
    search_provider = shotlist_generated.to(provider_searched)
    make_selection = (
        provider_searched.to(selection_made)
        | selection_made.to(selection_made)
        | exported.to(exported)
    )
    export = selection_made.to(exported) | exported.to(exported)
    reset = (
        awaiting_script.to(awaiting_script)
        | script_entered.to(awaiting_script)
        | shotlist_generated.to(awaiting_script)
        | provider_searched.to(awaiting_script)
        | selection_made.to(awaiting_script)
        | exported.to(awaiting_script)
    )


def create_fsm(step: int = 1) -> WorkflowSM:
    """Create a machine positioned at *step* (1-6)."""
    return WorkflowSM(start_value=step)


def check_transition(step: int, event: str) -> None:
    """Raise ``TransitionNotAllowed`` if *event* is illegal at *step*.

    Fires the event on a throwaway machine so the caller's machine is
    never touched.
    """
    create_fsm(step).send(event)
