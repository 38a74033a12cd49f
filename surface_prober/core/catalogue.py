from typing import Iterable, List, Mapping

from surface_prober.config import CSS_API, JS_API
from surface_prober.core.compiler import InvalidIdentifierError, is_bindable
from surface_prober.core.models import ProtoChainRecord


COMPAT_KEY = "__compat"


def _record(chain: List[str], api_type: str) -> ProtoChainRecord:
    return ProtoChainRecord(apiType=api_type, type=api_type, protoChain=chain)


def build_catalogue(
    namespaces: Mapping[str, Iterable[str]],
    api_type: str = JS_API,
) -> List[ProtoChainRecord]:
    """
    {"Window": ["alert"]} -> [Window, Window.alert]

    Namespace and member order follow the input, so batch positions are the
    same on every run.
    """
    records: List[ProtoChainRecord] = []

    for namespace, members in namespaces.items():
        if api_type == JS_API and not is_bindable(namespace):
            raise InvalidIdentifierError(f"Namespace is not a global identifier: {namespace!r}")

        if members is not None and not isinstance(members, (list, tuple)):
            raise ValueError(
                f"Members of {namespace!r} must be a list, got {type(members).__name__}"
            )

        records.append(_record([namespace], api_type))

        seen = set()
        for member in members or ():
            if not member or member in seen:
                continue
            seen.add(member)
            records.append(_record([namespace, member], api_type))

    return records


def catalogue_from_compat(dataset: Mapping) -> List[ProtoChainRecord]:
    """
    Walk a browser-compat-data document.

      api.<Interface>.<member>   -> js-api  [Interface, member]
      css.properties.<property>  -> css-api ["css", "properties", property]
    """
    api = dataset.get("api") or {}
    namespaces = {
        name: [member for member in (entry or {}) if member != COMPAT_KEY]
        for name, entry in api.items()
        if name != COMPAT_KEY
    }
    records = build_catalogue(namespaces, JS_API)

    properties = (dataset.get("css") or {}).get("properties") or {}
    for name in properties:
        if name == COMPAT_KEY:
            continue
        records.append(_record(["css", "properties", name], CSS_API))

    return records
