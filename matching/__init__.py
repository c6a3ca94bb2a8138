"""CDL driver/job matching engine."""
