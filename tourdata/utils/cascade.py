def run_cascade(soup, strategies):
    """
    Run extraction strategies in order.
    A strategy returns None when its selectors match nothing, otherwise a list
    of records (possibly empty). The first non-None result wins for the page;
    results from different strategies are never combined.
    Returns (records, strategy_name), or ([], None) when nothing matched.
    """
    for strategy in strategies:
        records = strategy(soup)
        if records is not None:
            return records, strategy.__name__
    return [], None


def first_text(element, selectors):
    """Text of the first element matched by the first selector that matches anything."""
    for selector in selectors:
        found = element.select_one(selector)
        if found is not None:
            return found.get_text(" ", strip=True)
    return ""
