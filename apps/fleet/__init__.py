"""Fleet app: vehicles, their occupancy and their service history."""
