import os
from hypothesis import settings, HealthCheck, Phase

settings.register_profile(
    'default',
    settings(
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow],
    ))

settings.register_profile(
    'coverage', settings(phases=[Phase.explicit]),
)

settings.load_profile(os.getenv('HYPOTHESIS_PROFILE', 'default'))
