"""
Family Tree Viewer - Streamlit front end.
Read-only: loads a member snapshot, draws the focus-couple tree as SVG, and shows
relationship labels from a chosen observer's point of view.
"""

import json
import logging

import streamlit as st
from st_click_detector import click_detector

from data_manager import DataManager, members_from_records, sample_members
from models import EMPTY_LAYOUT, Size, SnapshotError
from svg_renderer import SVGRenderer
from utils.logger_service import LoggerService, configure_logging
from viewport import ViewportController

PAN_STEP = 80
VIEWPORT_SIZE = Size(900, 700)

st.set_page_config(
    page_title="Family Tree",
    page_icon="🌳",
    layout="wide",
)

configure_logging(logging.INFO)


def _secret(name: str):
    # st.secrets raises when no secrets file exists at all.
    try:
        return st.secrets.get(name)
    except FileNotFoundError:
        return None


# --- 1. DATA ---
@st.cache_resource
def get_data_manager() -> DataManager:
    dm = DataManager(activity_logger=LoggerService(log_file=_secret('activity_log')))
    snapshot_path = _secret('snapshot_path')
    if snapshot_path:
        dm.load_snapshot(snapshot_path)
    else:
        dm.set_members(sample_members())
    return dm


def get_viewport() -> ViewportController:
    if 'viewport' not in st.session_state:
        st.session_state.viewport = ViewportController(viewport_size=VIEWPORT_SIZE)
    return st.session_state.viewport


def pan(controller: ViewportController, dx: float, dy: float):
    controller.begin_pan()
    controller.update_pan(dx, dy)
    controller.end_pan()


# --- 2. SIDEBAR ---
def render_sidebar(dm: DataManager, controller: ViewportController):
    st.sidebar.title("🌳 Family Tree")

    uploaded = st.sidebar.file_uploader("Member snapshot (JSON)", type=["json"])
    if uploaded is not None:
        try:
            data = json.load(uploaded)
            records = data.get('members') if isinstance(data, dict) else data
            if dm.set_members(members_from_records(records or [])):
                controller.reset()
        except (UnicodeDecodeError, json.JSONDecodeError, SnapshotError) as e:
            st.sidebar.error(f"Could not read snapshot: {e}")

    if st.sidebar.button("Load sample family"):
        if dm.set_members(sample_members()):
            controller.reset()

    st.sidebar.markdown("---")
    options = {f"{m.full_name} ({m.id})": m.id for m in dm.members}
    observer_label = st.sidebar.selectbox("👤 View as", ["--"] + sorted(options), key="observer")
    observer_id = options.get(observer_label)

    st.sidebar.markdown("---")
    st.sidebar.write("🔍 Zoom & pan")
    c1, c2, c3 = st.sidebar.columns(3)
    if c1.button("➕"):
        controller.wheel(1)
    if c2.button("➖"):
        controller.wheel(-1)
    if c3.button("🎯"):
        controller.reset()

    c1, c2, c3, c4 = st.sidebar.columns(4)
    if c1.button("⬅️"):
        pan(controller, -PAN_STEP, 0)
    if c2.button("➡️"):
        pan(controller, PAN_STEP, 0)
    if c3.button("⬆️"):
        pan(controller, 0, -PAN_STEP)
    if c4.button("⬇️"):
        pan(controller, 0, PAN_STEP)
    st.sidebar.caption(f"Scale {controller.state.scale:.2f} "
                       f"(min {controller.min_scale:.2f}, max {controller.max_scale:.2f})")
    return observer_id


# --- 3. MAIN AREA ---
def render_member_panel(dm: DataManager, member_id: str, observer_id):
    member = dm.get_member_by_id(member_id)
    if member is None:
        return

    st.subheader(member.full_name)
    if observer_id:
        st.write(f"**Relationship:** {dm.relationship_label(observer_id, member_id, possessive=True)}")
    if member.birth_date:
        st.write(f"**Born:** {member.birth_date.isoformat()}")
    if member.death_date:
        st.write(f"**Died:** {member.death_date.isoformat()}")
    siblings = dm.siblings_of(member_id)
    if siblings:
        st.write(f"**Siblings:** {', '.join(s.display_name for s in siblings)}")
    if member.bio:
        st.write(member.bio)


def render_main_area(dm: DataManager, controller: ViewportController, observer_id):
    tree = dm.build_family_tree()
    if tree is None:
        controller.resize(content_size=EMPTY_LAYOUT.tree_size)
        st.info("No couple with both parents and children was found in this snapshot.")
        return

    controller.resize(content_size=tree.layout.tree_size)
    renderer = SVGRenderer(tree, dm.connectors(), dm.relationships, observer_id)
    clicked_id = click_detector(renderer.generate_svg(controller.transform()), key="tree_view")

    st.markdown("---")
    if clicked_id:
        st.session_state.selected_member_id = clicked_id
    selected = st.session_state.get('selected_member_id')
    if selected:
        render_member_panel(dm, selected, observer_id)
    else:
        st.info("👆 Click a person in the tree.")


def main():
    dm = get_data_manager()
    controller = get_viewport()
    observer_id = render_sidebar(dm, controller)
    render_main_area(dm, controller, observer_id)


if __name__ == "__main__":
    main()
