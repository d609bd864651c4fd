# -----------------------------------------------------------------------------
# Streamlit Frontend for the Formula Workbench
# Purpose:
#   Thin presentation layer over workbench.Workbench: (1) goal-seek calculator,
#   (2) formula registry management, (3) forward evaluation.
#   All workbench coroutines run on ONE background asyncio loop, so toast
#   timers and in-flight requests survive Streamlit reruns.
# -----------------------------------------------------------------------------

import asyncio
import threading

import streamlit as st

from workbench import Workbench
from workbench import config
from workbench.forms import ContextKind
from workbench.logger import setup_logging
from workbench.notifications import ToastKind, ToastState

setup_logging(config.LOG_LEVEL)

st.set_page_config(page_title="Goal Seek Workbench", layout="centered")
st.title("Goal Seek Workbench")

PLACEHOLDER = "Select a formula..."
SECTION_LABELS = {"calculator": "Calculator", "formulas": "Formulas", "evaluate": "Evaluate"}


# ---------------- event loop bridge -------------------------------------------
@st.cache_resource
def _event_loop() -> asyncio.AbstractEventLoop:
    loop = asyncio.new_event_loop()
    threading.Thread(target=loop.run_forever, name="workbench-loop", daemon=True).start()
    return loop


def run(coro):
    """Run a coroutine on the workbench loop and wait for it."""
    return asyncio.run_coroutine_threadsafe(coro, _event_loop()).result()


def call(fn, *args):
    """Run a plain workbench method on the loop thread too (single logical thread)."""
    async def _inner():
        return fn(*args)
    return run(_inner())


def workbench() -> Workbench:
    if "workbench" not in st.session_state:
        wb = Workbench()
        run(wb.start())
        st.session_state["workbench"] = wb
    return st.session_state["workbench"]


wb = workbench()


# ---------------- toasts --------------------------------------------------------
def render_toasts():
    # snapshot taken on the loop thread, where the dismiss timers run
    for toast in call(wb.notifications.active):
        if toast.state is ToastState.REMOVING:
            continue
        text = f"**{toast.icon} {toast.title}**" + (f" — {toast.message}" if toast.message else "")
        cols = st.columns([12, 1])
        with cols[0]:
            if toast.kind is ToastKind.SUCCESS:
                st.success(text)
            elif toast.kind is ToastKind.WARNING:
                st.warning(text)
            else:
                st.error(text)
        with cols[1]:
            if st.button("×", key=f"toast-{toast.id}"):
                call(wb.notifications.dismiss, toast)
                st.rerun()


def render_card(card):
    st.subheader(card.title)
    st.metric(label=card.headline_label, value=card.headline)
    st.table([{"": label, "value": value} for label, value in card.rows])
    if card.chips:
        st.markdown(f"**{card.chips_title}**")
        st.write("  ·  ".join(card.chips))


def formula_options():
    return [PLACEHOLDER] + wb.store.names()


# ---------------- sidebar: navigation ------------------------------------------
with st.sidebar:
    st.subheader("Sections")
    section = st.radio("Go to", wb.navigation.sections,
                       index=wb.navigation.sections.index(wb.navigation.active),
                       format_func=lambda s: SECTION_LABELS.get(s, s))
    if section != wb.navigation.active:
        call(wb.navigation.switch, section)
    st.caption(f"API: {config.API_URL}")
    st.caption(f"{len(wb.store)} formulas loaded")

render_toasts()


# ---------------- calculator (goal seek) ---------------------------------------
def on_calc_formula():
    name = st.session_state["calc-formula"]
    call(wb.select_formula, ContextKind.CALCULATOR, None if name == PLACEHOLDER else name)


def on_seek_variable():
    var = st.session_state["calc-seek"]
    call(wb.select_seek_variable, var or None)


def calculator_section():
    ctx = wb.calculator
    current = ctx.formula.name if ctx.formula else PLACEHOLDER
    options = formula_options()
    st.selectbox("Formula", options, index=options.index(current) if current in options else 0,
                 key="calc-formula", on_change=on_calc_formula)
    if ctx.formula is None:
        return

    st.code(ctx.formula.expression)
    if ctx.formula.description:
        st.caption(ctx.formula.description)

    seek_options = [""] + list(ctx.formula.variables)
    st.selectbox("Solve for", seek_options,
                 index=seek_options.index(ctx.seek_variable) if ctx.seek_variable else 0,
                 format_func=lambda v: v or "Select variable...",
                 key="calc-seek", on_change=on_seek_variable)
    call(ctx.set_target, st.text_input("Target value", value=ctx.target, key=f"calc-target-{ctx.formula.name}"))

    prefix = f"calc-{ctx.formula.name}-{ctx.seek_variable}"
    if ctx.fields():
        st.markdown("**Known values**")
    for fd in ctx.fields():
        call(ctx.set_value, fd.variable, st.text_input(fd.label, value=fd.value, key=f"{prefix}-{fd.variable}",
                                                       placeholder="Enter value"))
    with st.expander("Solver hints (optional)"):
        lower = st.text_input("Lower bound", value=ctx.lower_bound, key=f"{prefix}-lower")
        upper = st.text_input("Upper bound", value=ctx.upper_bound, key=f"{prefix}-upper")
        guess = st.text_input("Initial guess", value=ctx.initial_guess, key=f"{prefix}-guess")
        call(ctx.set_bounds, lower, upper, guess)

    if st.button("Calculate", type="primary", disabled=not wb.goal_seek.can_submit):
        with st.spinner("Calculating..."):
            run(wb.calculate())
        st.rerun()
    if wb.goal_seek.card:
        render_card(wb.goal_seek.card)


# ---------------- formulas (registry CRUD) -------------------------------------
def fill_draft(draft, name, expression, description, output_variable, variables_text):
    if not draft.name_locked:
        draft.name = name
    draft.expression, draft.description = expression, description
    draft.output_variable, draft.variables_text = output_variable, variables_text


def formulas_section():
    crud = wb.formulas
    draft = crud.draft
    st.subheader("Edit Formula" if crud.is_editing else "Create Formula")
    # new key per revision so a reset draft also resets the widgets
    rev = st.session_state.setdefault("draft-rev", 0)
    form_key = f"draft-{crud.editing.name if crud.editing else 'new'}-{rev}"
    with st.form(form_key):
        name = st.text_input("Name", value=draft.name, disabled=draft.name_locked)
        expression = st.text_input("Expression", value=draft.expression)
        description = st.text_area("Description", value=draft.description)
        output_variable = st.text_input("Output variable", value=draft.output_variable)
        variables_text = st.text_input("Variables (comma-separated)", value=draft.variables_text)
        submitted = st.form_submit_button("Update Formula" if crud.is_editing else "Create Formula")
    if submitted:
        call(fill_draft, draft, name, expression, description, output_variable, variables_text)
        if run(wb.save_formula()):
            st.session_state["draft-rev"] = rev + 1
        st.rerun()
    if crud.is_editing and st.button("Cancel edit"):
        call(wb.cancel_edit)
        st.session_state["draft-rev"] = rev + 1
        st.rerun()

    st.divider()
    if st.button("Refresh"):
        run(wb.refresh())
        st.rerun()

    if not wb.store.formulas:
        st.info("No formulas found. Create one to get started!")
    pending = st.session_state.get("pending-delete")
    for f in wb.store.formulas:
        with st.container(border=True):
            cols = st.columns([6, 1, 1])
            cols[0].markdown(f"**{f.name}**  \n`{f.expression}`")
            if cols[1].button("✎", key=f"edit-{f.name}", help="Edit"):
                call(wb.edit_formula, f.name)
                st.session_state["draft-rev"] = st.session_state.get("draft-rev", 0) + 1
                st.rerun()
            if cols[2].button("×", key=f"delete-{f.name}", help="Delete"):
                st.session_state["pending-delete"] = f.name
                st.rerun()
            st.caption(f"Output: {f.output_variable} · Variables: {', '.join(f.variables)}")
            if f.description:
                st.caption(f.description)
            if pending == f.name:
                st.warning(f'Are you sure you want to delete the formula "{f.name}"?')
                yes, no = st.columns(2)
                if yes.button("Delete", key=f"confirm-{f.name}"):
                    st.session_state.pop("pending-delete", None)
                    run(wb.delete_formula(f.name, confirm=lambda _name: True))
                    st.rerun()
                if no.button("Keep", key=f"keep-{f.name}"):
                    st.session_state.pop("pending-delete", None)
                    st.rerun()


# ---------------- evaluate ------------------------------------------------------
def on_eval_formula():
    name = st.session_state["eval-formula"]
    call(wb.select_formula, ContextKind.EVALUATOR, None if name == PLACEHOLDER else name)


def evaluate_section():
    ctx = wb.evaluator
    current = ctx.formula.name if ctx.formula else PLACEHOLDER
    options = formula_options()
    st.selectbox("Formula", options, index=options.index(current) if current in options else 0,
                 key="eval-formula", on_change=on_eval_formula)
    if ctx.formula is None:
        return
    st.code(ctx.formula.expression)
    for fd in ctx.fields():
        call(ctx.set_value, fd.variable, st.text_input(fd.label, value=fd.value,
                                                       key=f"eval-{ctx.formula.name}-{fd.variable}",
                                                       placeholder="Enter value"))
    if st.button("Evaluate", type="primary", disabled=not wb.evaluation.can_submit):
        with st.spinner("Evaluating..."):
            run(wb.evaluate())
        st.rerun()
    if wb.evaluation.card:
        render_card(wb.evaluation.card)


SECTIONS = {
    "calculator": calculator_section,
    "formulas": formulas_section,
    "evaluate": evaluate_section,
}
SECTIONS[wb.navigation.active]()
