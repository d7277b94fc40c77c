"""HTTP surface over the fund accounting engine."""
