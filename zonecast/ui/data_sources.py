"""
Data source panel: enable/disable sources, change the sampled field, and
edit each source's colour rules.
"""

import streamlit as st

from zonecast.core.dashboard_store import DashboardStore
from zonecast.errors import ValidationError
from zonecast.models.dashboard import DataSource, Operator, SampleField

OPERATORS = [op.value for op in Operator]
FIELDS = [f.value for f in SampleField]


def _render_rules(store: DashboardStore, source: DataSource):
    st.write("**Color Rules**")
    for rule in list(source.color_rules):
        c_color, c_op, c_value, c_del = st.columns([1, 1, 2, 1])
        key = f"{source.id}_{rule.id}"
        color = c_color.color_picker("Color", rule.color, key=f"{key}_color", label_visibility="collapsed")
        op = c_op.selectbox(
            "Operator",
            OPERATORS,
            index=OPERATORS.index(rule.operator.value),
            key=f"{key}_op",
            label_visibility="collapsed",
        )
        threshold = c_value.number_input(
            "Threshold", value=float(rule.threshold), key=f"{key}_value", label_visibility="collapsed"
        )
        if (color, op, threshold) != (rule.color, rule.operator.value, rule.threshold):
            store.update_color_rule(source.id, rule.id, color=color, operator=op, threshold=threshold)
        if c_del.button("🗑", key=f"{key}_delete"):
            try:
                store.delete_color_rule(source.id, rule.id)
                st.rerun()
            except ValidationError as e:
                st.error(str(e))

    if st.button("➕ Add Rule", key=f"{source.id}_add_rule"):
        store.add_color_rule(source.id, ">=", 0, "#3b82f6")
        st.rerun()


def _render_source(store: DashboardStore, source: DataSource):
    status = "Active" if source.active else "Inactive"
    with st.expander(f"{source.name} · {status}", expanded=source.active):
        c_toggle, c_delete = st.columns(2)
        if c_toggle.button("Disable" if source.active else "Enable", key=f"{source.id}_toggle"):
            store.update_data_source(source.id, active=not source.active)
            st.rerun()
        if c_delete.button("Delete source", key=f"{source.id}_delete"):
            store.delete_data_source(source.id)
            st.rerun()

        field = st.selectbox(
            "Data Field",
            FIELDS,
            index=FIELDS.index(source.field.value),
            format_func=lambda f: SampleField(f).display_name,
            key=f"{source.id}_field",
        )
        if field != source.field.value:
            store.update_data_source(source.id, field=field)

        _render_rules(store, source)


def _render_add_form(store: DashboardStore):
    with st.form("add_data_source", clear_on_submit=True):
        st.write("**Add Data Source**")
        name = st.text_input("Source Name", placeholder="Custom Weather API")
        field = st.selectbox("Data Field", FIELDS, format_func=lambda f: SampleField(f).display_name)
        unit = st.text_input("Unit", value=SampleField.TEMPERATURE_2M.default_unit)
        if st.form_submit_button("Add Source"):
            try:
                store.add_data_source(name, field, unit)
                st.success("Data source added.")
            except ValidationError as e:
                st.error(str(e))


def render(store: DashboardStore):
    """Render the data source panel."""
    st.subheader("Data Sources")
    for source in list(store.data_sources):
        _render_source(store, source)
    _render_add_form(store)
