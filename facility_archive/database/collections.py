# Collection Names
COLLECTIONS = {
    'users': 'users',
    'maintenance_plans': 'maintenance_plans',
    'maintenance_tasks': 'maintenance_tasks',
    'work_orders': 'work_orders',
    'issue_logs': 'issue_logs',
    'inspection_records': 'inspection_records',
    'generated_reports': 'generated_reports',
    'system_stats': 'system_stats',
    'dashboard_stats': 'dashboard_stats',
}

# Archive sources: which documents of a collection count as archived, and
# which field carries their completion moment.
ARCHIVE_SOURCES = {
    'maintenance': {
        'collection': COLLECTIONS['maintenance_tasks'],
        'record_type': 'maintenance',
        'base_filters': [('archived', '==', True)],
        'completion_field': 'completedAt',
    },
    'work_orders': {
        'collection': COLLECTIONS['work_orders'],
        'record_type': 'work_order',
        'base_filters': [('status', 'in', ['Completed', 'Closed', 'Cancelled'])],
        'completion_field': 'completedAt',
    },
    'issues': {
        'collection': COLLECTIONS['issue_logs'],
        'record_type': 'issue',
        'base_filters': [('status', 'in', ['Resolved', 'Closed'])],
        'completion_field': 'resolutionDate',
    },
    'inspections': {
        'collection': COLLECTIONS['inspection_records'],
        'record_type': 'inspection',
        'base_filters': [('status', '==', 'Completed')],
        'completion_field': 'completedAt',
    },
}

# collectionSource -> completion field, for records already tagged with their origin
COMPLETION_FIELDS = {
    source['collection']: source['completion_field'] for source in ARCHIVE_SOURCES.values()
}
