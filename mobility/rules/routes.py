"""Reference route data: visa requirements, flight costs and flight emissions.

Keys are (origin, destination). Visa rules are keyed by nationality, flight
cost (EUR) and carbon footprint (kg CO2) by current location.
"""

from mobility.core.schemas import VisaRule

_ESTA = "ESTA Waiver"
_DOMESTIC = "Domestic"
_WAIVER = "Visa Waiver"


def _rule(origin: str, destination: str, days: int, visa_type: str, notes: str = "") -> VisaRule:
    return VisaRule(
        origin=origin, destination=destination, wait_days=days, visa_type=visa_type, notes=notes,
    )


VISA_RULES: tuple[VisaRule, ...] = (
    _rule("Finland", "Brazil", 0, "Visa Waiver (90 days)", "Tech work requires Work Visa (5 days)"),
    _rule("Portugal", "Brazil", 0, _WAIVER, "Special Treaty"),
    _rule("India", "Brazil", 25, "Consular Visa Required", "Must apply at embassy"),
    _rule("UK", "Brazil", 0, _WAIVER, "Reciprocal agreement"),
    _rule("Finland", "USA", 3, _ESTA, "Instant approval for most"),
    _rule("Portugal", "USA", 3, _ESTA, "Instant approval"),
    _rule("India", "USA", 60, "B1/B2 Interview Required", "Long wait times for interview"),
    _rule("UK", "USA", 3, _ESTA, "Instant approval for most"),
    _rule("USA", "USA", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "NewEngland", 3, _ESTA, "Instant approval for most"),
    _rule("Portugal", "NewEngland", 3, _ESTA, "Instant approval"),
    _rule("India", "NewEngland", 60, "B1/B2 Interview Required", "Long wait times for interview"),
    _rule("UK", "NewEngland", 3, _ESTA, "VWP eligible"),
    _rule("USA", "NewEngland", 0, _DOMESTIC, "No visa required - domestic travel"),
    _rule("UAE", "NewEngland", 3, _ESTA, "VWP eligible"),
    _rule("Brazil", "NewEngland", 14, "B1/B2 Visa", "Interview required"),
    _rule("Finland", "Jamaica", 0, _WAIVER, "90 days visa-free for tourism/business"),
    _rule("Portugal", "Jamaica", 0, _WAIVER, "90 days visa-free"),
    _rule("India", "Jamaica", 14, "Visa Required", "Apply online or at embassy"),
    _rule("UK", "Jamaica", 0, _WAIVER, "180 days visa-free - Commonwealth"),
    _rule("USA", "Jamaica", 0, _WAIVER, "90 days visa-free"),
    _rule("Finland", "California", 3, _ESTA, "VWP eligible"),
    _rule("UK", "California", 3, _ESTA, "VWP eligible"),
    _rule("USA", "California", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "Texas", 3, _ESTA, "VWP eligible"),
    _rule("UK", "Texas", 3, _ESTA, "VWP eligible"),
    _rule("USA", "Texas", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "Florida", 3, _ESTA, "VWP eligible"),
    _rule("UK", "Florida", 3, _ESTA, "VWP eligible"),
    _rule("USA", "Florida", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "NewYork", 3, _ESTA, "VWP eligible"),
    _rule("UK", "NewYork", 3, _ESTA, "VWP eligible"),
    _rule("USA", "NewYork", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "London", 0, _WAIVER, "6 months visa-free"),
    _rule("USA", "London", 0, _WAIVER, "6 months visa-free"),
    _rule("UK", "London", 0, _DOMESTIC, "No visa required"),
    _rule("India", "London", 21, "Standard Visitor Visa", "Apply online"),
    _rule("Finland", "Manchester", 0, _WAIVER, "6 months visa-free"),
    _rule("USA", "Manchester", 0, _WAIVER, "6 months visa-free"),
    _rule("UK", "Manchester", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "Edinburgh", 0, _WAIVER, "6 months visa-free"),
    _rule("USA", "Edinburgh", 0, _WAIVER, "6 months visa-free"),
    _rule("UK", "Edinburgh", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "Birmingham", 0, _WAIVER, "6 months visa-free"),
    _rule("USA", "Birmingham", 0, _WAIVER, "6 months visa-free"),
    _rule("UK", "Birmingham", 0, _DOMESTIC, "No visa required"),
    _rule("Finland", "Singapore", 14, "Employment Pass", "Online application"),
    _rule("India", "Singapore", 21, "Employment Pass", "Online application"),
)

FLIGHT_COSTS: dict[tuple[str, str], float] = {
    ("Finland", "Brazil"): 1200,
    ("Portugal", "Brazil"): 800,
    ("India", "Brazil"): 1500,
    ("UAE", "Brazil"): 1300,
    ("Brazil", "Brazil"): 0,
    ("Finland", "USA"): 900,
    ("Portugal", "USA"): 700,
    ("India", "USA"): 1100,
    ("UK", "USA"): 600,
    ("USA", "USA"): 0,
    ("Finland", "NewEngland"): 850,
    ("Portugal", "NewEngland"): 650,
    ("India", "NewEngland"): 1050,
    ("UK", "NewEngland"): 550,
    ("USA", "NewEngland"): 200,
    ("UAE", "NewEngland"): 1100,
    ("Brazil", "NewEngland"): 950,
    ("Finland", "Jamaica"): 1100,
    ("Portugal", "Jamaica"): 950,
    ("India", "Jamaica"): 1400,
    ("UK", "Jamaica"): 700,
    ("USA", "Jamaica"): 350,
    ("Finland", "California"): 950,
    ("UK", "California"): 700,
    ("USA", "California"): 250,
    ("Finland", "Texas"): 900,
    ("UK", "Texas"): 650,
    ("USA", "Texas"): 200,
    ("Finland", "Florida"): 880,
    ("UK", "Florida"): 620,
    ("USA", "Florida"): 180,
    ("Finland", "NewYork"): 800,
    ("UK", "NewYork"): 500,
    ("USA", "NewYork"): 150,
    ("Finland", "London"): 200,
    ("USA", "London"): 550,
    ("UK", "London"): 50,
    ("India", "London"): 650,
    ("Finland", "Manchester"): 220,
    ("USA", "Manchester"): 580,
    ("UK", "Manchester"): 40,
    ("Finland", "Edinburgh"): 250,
    ("USA", "Edinburgh"): 600,
    ("UK", "Edinburgh"): 60,
    ("Finland", "Birmingham"): 210,
    ("USA", "Birmingham"): 570,
    ("UK", "Birmingham"): 35,
    ("Finland", "Singapore"): 1000,
    ("India", "Singapore"): 400,
    ("UAE", "Singapore"): 500,
}

CARBON_FOOTPRINT: dict[tuple[str, str], float] = {
    ("Finland", "Brazil"): 1850,
    ("Portugal", "Brazil"): 1420,
    ("India", "Brazil"): 2100,
    ("UAE", "Brazil"): 1650,
    ("Brazil", "Brazil"): 0,
    ("Finland", "USA"): 1200,
    ("Portugal", "USA"): 1050,
    ("India", "USA"): 2400,
    ("UK", "USA"): 950,
    ("USA", "USA"): 0,
    ("Finland", "NewEngland"): 1150,
    ("Portugal", "NewEngland"): 980,
    ("India", "NewEngland"): 2300,
    ("UK", "NewEngland"): 850,
    ("USA", "NewEngland"): 180,
    ("UAE", "NewEngland"): 1800,
    ("Brazil", "NewEngland"): 1400,
    ("Finland", "Jamaica"): 1650,
    ("Portugal", "Jamaica"): 1400,
    ("India", "Jamaica"): 2500,
    ("UK", "Jamaica"): 1100,
    ("USA", "Jamaica"): 450,
    ("Finland", "California"): 1350,
    ("UK", "California"): 1050,
    ("USA", "California"): 280,
    ("Finland", "Texas"): 1280,
    ("UK", "Texas"): 980,
    ("USA", "Texas"): 220,
    ("Finland", "Florida"): 1250,
    ("UK", "Florida"): 950,
    ("USA", "Florida"): 200,
    ("Finland", "NewYork"): 1100,
    ("UK", "NewYork"): 800,
    ("USA", "NewYork"): 150,
    ("Finland", "London"): 280,
    ("USA", "London"): 900,
    ("UK", "London"): 10,
    ("India", "London"): 1050,
    ("Finland", "Manchester"): 300,
    ("USA", "Manchester"): 920,
    ("UK", "Manchester"): 8,
    ("Finland", "Edinburgh"): 320,
    ("USA", "Edinburgh"): 950,
    ("UK", "Edinburgh"): 15,
    ("Finland", "Birmingham"): 290,
    ("USA", "Birmingham"): 910,
    ("UK", "Birmingham"): 8,
    ("Finland", "Singapore"): 1580,
    ("India", "Singapore"): 450,
    ("UAE", "Singapore"): 680,
}
