"""
Execution cost and confidence model.

Costs are flat per-chain estimates in basis points of notional. A
cross-chain route pays both chains plus a bridge surcharge.
"""

from marketoracle.config.constants import (
    BASE_CONFIDENCE,
    BRIDGE_COST_BPS,
    DEFAULT_GAS_COST_BPS,
    GAS_COST_BPS,
    HIGH_GAS_PENALTY,
    SAME_CHAIN_BONUS,
    SPREAD_CONFIDENCE_TIERS,
)
from marketoracle.utils.math import clamp


class CostModel:
    """
    Gas/bridge cost estimator and confidence scorer.

    The chain with the highest gas cost in the table is treated as the
    congested chain and penalized in confidence.
    """

    def __init__(
        self,
        gas_costs_bps: dict[str, float] | None = None,
        default_gas_bps: float = DEFAULT_GAS_COST_BPS,
        bridge_cost_bps: float = BRIDGE_COST_BPS,
    ) -> None:
        """
        Initialize the cost model.

        Args:
            gas_costs_bps: Chain -> gas cost in bps of notional.
            default_gas_bps: Cost assumed for chains missing from the table.
            bridge_cost_bps: Surcharge for cross-chain settlement.
        """
        self._gas_costs = dict(GAS_COST_BPS if gas_costs_bps is None else gas_costs_bps)
        self._default_gas = default_gas_bps
        self._bridge_cost = bridge_cost_bps
        self._highest_gas_chain = (
            max(self._gas_costs, key=self._gas_costs.__getitem__) if self._gas_costs else None
        )

    @property
    def highest_gas_chain(self) -> str | None:
        """Chain with the most expensive execution."""
        return self._highest_gas_chain

    @property
    def bridge_cost_bps(self) -> float:
        """Cross-chain settlement surcharge."""
        return self._bridge_cost

    def gas_cost_bps(self, chain: str) -> float:
        """Gas cost of one leg on `chain`."""
        return self._gas_costs.get(chain, self._default_gas)

    def estimate_cost_bps(self, buy_chain: str, sell_chain: str) -> float:
        """
        Estimate total execution cost of a buy/sell pair.

        Example:
            >>> CostModel().estimate_cost_bps("eth", "polygon")
            50.0
            >>> CostModel().estimate_cost_bps("polygon", "polygon")
            10.0
        """
        cost = self.gas_cost_bps(buy_chain) + self.gas_cost_bps(sell_chain)
        if buy_chain != sell_chain:
            cost += self._bridge_cost
        return cost

    def confidence(self, spread_bps: float, buy_chain: str, sell_chain: str) -> int:
        """
        Score an opportunity from 0 to 100.

        Wider spreads and same-chain routes score higher; touching the
        congested chain scores lower.
        """
        score = BASE_CONFIDENCE

        for threshold, bonus in SPREAD_CONFIDENCE_TIERS:
            if spread_bps > threshold:
                score += bonus
                break

        if buy_chain == sell_chain:
            score += SAME_CHAIN_BONUS

        if self.highest_gas_chain in (buy_chain, sell_chain):
            score -= HIGH_GAS_PENALTY

        return int(clamp(score, 0, 100))
