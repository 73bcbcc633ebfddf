"""Bonus Pool Allocation Engine: Streamlit entry point."""

import logging
import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from components.sidebar import render_sidebar
from data.session_store import initialize_session_state
from tabs import (
    tab_allocation_run,
    tab_fairness,
    tab_scenario_lab,
)


def main():
    st.set_page_config(
        page_title="Bonus Pool Allocation",
        page_icon="💰",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    initialize_session_state()
    sidebar_state = render_sidebar()

    tab1, tab2, tab3 = st.tabs([
        "💰 Allocation Run",
        "⚖️ Fairness & Quality",
        "🧪 Scenario Lab",
    ])

    with tab1:
        tab_allocation_run.render(sidebar_state)
    with tab2:
        tab_fairness.render(sidebar_state)
    with tab3:
        tab_scenario_lab.render(sidebar_state)


if __name__ == "__main__":
    main()
