"""CoreIQ Scorer service.

Operational maturity diagnostic: an operator rates each business function
against a fixed questionnaire and the service rolls the answers up into
component, function and overall scores with a qualitative band.
"""

__version__ = "0.1.0"
