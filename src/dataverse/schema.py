"""
Logical names of the Dataverse tables and columns the portal reads.
"""

# Worker master (作業員マスタ)
WORKER_ENTITY_SET = "new_sagyouin_mastas"
WORKER_MAIL = "new_mail"
WORKER_NAME = "new_sagyouin_id"
OWNING_BUSINESS_UNIT = "_owningbusinessunit_value"

# Dispatch records (配車)
DISPATCH_ENTITY_SET = "new_table2s"
DISPATCH_DAY = "new_day"
DISPATCH_SITE_NAME = "new_genbamei"
DISPATCH_WORK_CONTENT = "new_sagyou_naiyou"
DISPATCH_START_TIME = "new_start_time"

DISPATCH_FIELDS = (
    DISPATCH_DAY,
    DISPATCH_SITE_NAME,
    DISPATCH_WORK_CONTENT,
    DISPATCH_START_TIME,
)
