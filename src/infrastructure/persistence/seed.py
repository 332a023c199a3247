"""
infrastructure.persistence.seed - Reference data for the plan catalog and agents.

Only inserts when the table is empty, so it is safe to run at every startup.
"""

from __future__ import annotations

import logging

from domain.entities import Agent, Plan
from domain.ports import AgentRepository, PlanRepository

logger = logging.getLogger(__name__)

DEFAULT_PLANS: tuple[Plan, ...] = (
    Plan(code="HEALTH-BASIC", name="Basic Health Insurance", category="health",
         base_premium=1200, sum_insured=500000,
         riders=["OPD", "Critical Illness"]),
    Plan(code="HEALTH-PREMIUM", name="Premium Health Insurance", category="health",
         base_premium=2500, sum_insured=1000000,
         riders=["OPD", "Critical Illness", "Maternity", "Dental"]),
    Plan(code="LIFE-TERM", name="Term Life Insurance", category="life",
         base_premium=800, sum_insured=5000000,
         riders=["Accidental Death", "Critical Illness"]),
    Plan(code="MOTOR-COMPREHENSIVE", name="Comprehensive Motor Insurance", category="motor",
         base_premium=1500, sum_insured=300000,
         riders=["Zero Depreciation", "Engine Protection"]),
    Plan(code="HOME-STANDARD", name="Standard Home Insurance", category="home",
         base_premium=1000, sum_insured=2000000,
         riders=["Earthquake", "Fire", "Theft"]),
)

DEFAULT_AGENTS: tuple[Agent, ...] = (
    Agent(code="AGT001", name="Rajesh Kumar", email="rajesh.kumar@insurance.com"),
    Agent(code="AGT002", name="Priya Sharma", email="priya.sharma@insurance.com"),
    Agent(code="AGT003", name="Amit Patel", email="amit.patel@insurance.com"),
)


async def seed_reference_data(
    plans: PlanRepository,
    agents: AgentRepository,
) -> None:
    if await plans.count() == 0:
        for plan in DEFAULT_PLANS:
            await plans.save(plan)
        logger.info("Seeded %d plans", len(DEFAULT_PLANS))

    if await agents.count() == 0:
        for agent in DEFAULT_AGENTS:
            await agents.save(agent)
        logger.info("Seeded %d agents", len(DEFAULT_AGENTS))
