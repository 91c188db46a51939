# masjid_board/metrics.py

from prometheus_client import Counter, Histogram

# Define Prometheus metrics

# Iqamaah Mutation Metrics
IQAMAAH_MUTATIONS_TOTAL = Counter('masjid_board_iqamaah_mutations_total', 'Total Iqamaah mutations', ['operation', 'prayer', 'status'])
IQAMAAH_WRITE_CONFLICTS_TOTAL = Counter('masjid_board_iqamaah_write_conflicts_total', 'Optimistic-version conflicts while saving the Iqamaah aggregate', ['operation'])

# Operation Duration
IQAMAAH_OPERATION_DURATION_SECONDS = Histogram('masjid_board_iqamaah_operation_duration_seconds', 'Iqamaah operation duration in seconds', ['operation'])
