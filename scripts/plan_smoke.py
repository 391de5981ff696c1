from __future__ import annotations

from goalplan.tools.planning_tools import tool_plan_goal, tool_project_future_cost, tool_solve_contribution


def main():
    education = {
        "lastYearFee": 1500000,
        "expectedIncreasePercentLt10Yr": 8,
        "expectedIncreasePercentGt10Yr": 6,
        "horizon_years": 12,
    }
    fc = tool_project_future_cost(education)
    print("Future cost:", fc["future_cost"])
    for w in fc["warnings"]:
        print("Warning:", w)

    sip = tool_solve_contribution(
        {
            "targetAmount": "1000000",
            "horizon_years": 10,
            "returns": 12,
            "lumpSumAmount": "0",
            "stepUpAmount": "0",
        }
    )
    print("Recommended SIP:", sip["recommended_monthly_sip"], sip["status"])
    print("Suggested range:", sip["suggested_range"])
    print("Unrounded SIP:", sip["unrounded_sip"])

    goal = dict(education, returns=12, lumpSumAmount=100000, yearly_setup=1000, minInvestment=1000)
    gp = tool_plan_goal(goal)
    print("Goal target:", gp["target_amount"], "in", gp["horizon_years"], "years")
    print("Plan:", gp["plan"])
    print("Normalized SIP:", gp["normalized_monthly_sip"])
    for row in gp["schedule"]:
        print("Year", row["year"], "SIP", round(row["monthly_sip"], 2), "balance", round(row["balance"], 2))


if __name__ == "__main__":
    main()
