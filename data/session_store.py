"""Typed wrapper around st.session_state for application data."""

import streamlit as st
from typing import Dict, List, Optional
from models.employee import EligibleEmployee
from models.scenario import AllocationScenario
from engine.allocation_engine import AllocationRun
from data.sample_data import default_pool_config, default_rule_config


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    defaults = {
        "employees": [],
        "scenarios": {},
        "last_run": None,
        "last_error": None,
        "data_loaded": False,
        "pool_config": default_pool_config(),
        "rule_config": default_rule_config(),
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


# --- Getters ---

def get_employees() -> List[EligibleEmployee]:
    return st.session_state.get("employees", [])


def get_pool_config() -> dict:
    return st.session_state.get("pool_config", {})


def get_rule_config() -> dict:
    return st.session_state.get("rule_config", {})


def get_last_run() -> Optional[AllocationRun]:
    return st.session_state.get("last_run")


def get_last_error() -> Optional[str]:
    return st.session_state.get("last_error")


def get_scenarios() -> Dict[str, AllocationScenario]:
    return st.session_state.get("scenarios", {})


def is_data_loaded() -> bool:
    return st.session_state.get("data_loaded", False)


# --- Setters ---

def set_employees(employees: List[EligibleEmployee]):
    st.session_state["employees"] = employees
    st.session_state["data_loaded"] = bool(employees)


def set_pool_config(config: dict):
    st.session_state["pool_config"] = config


def set_rule_config(config: dict):
    st.session_state["rule_config"] = config


def set_last_run(run: Optional[AllocationRun], error: Optional[str] = None):
    st.session_state["last_run"] = run
    st.session_state["last_error"] = error


# --- Scenario Management ---

def add_scenario(scenario: AllocationScenario):
    st.session_state["scenarios"][scenario.scenario_id] = scenario


def remove_scenario(scenario_id: str):
    st.session_state["scenarios"].pop(scenario_id, None)
