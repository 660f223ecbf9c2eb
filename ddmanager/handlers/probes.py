import kopf

from ddmanager.utils.helpers import utc_now


# Liveness probe
@kopf.on.probe(id='now')
def get_current_timestamp(**kwargs):
    return utc_now().isoformat()


@kopf.on.probe(id='rulesets')
def get_ruleset_status(memo: kopf.Memo, **kwargs):
    store = getattr(memo, "store", None)
    if store is None or not store.loaded:
        return {"loaded": False}
    return {"loaded": True, "rules": len(store.current().rules)}
