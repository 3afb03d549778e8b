from dataclasses import dataclass, asdict

@dataclass
class CostTracker:
    # DeepL bills source characters only
    cost_per_million: float = 20.0
    requests: int = 0
    billed_chars: int = 0
    received_chars: int = 0

    def add(self, billed_chars: int, received_chars: int) -> None:
        self.requests += 1
        self.billed_chars += billed_chars
        self.received_chars += received_chars

    @property
    def est_cost_usd(self) -> float:
        return (self.billed_chars / 1_000_000.0) * self.cost_per_million

    def as_dict(self) -> dict:
        d = asdict(self)
        d["est_cost_usd"] = round(self.est_cost_usd, 6)
        return d
