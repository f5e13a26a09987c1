# Response Composer - fulfillment text for every lookup outcome
# Plain text only; multi-line answers are newline-separated

from typing import List

from .models import ErrorKind, ResultKind, StockLevel, StockResult

HELP_TEXT = ('Which product and store should I check? For example: '
             '"Is Oil Packet 1KG available at 99 Speedmart Acacia?"')
FALLBACK_TEXT = "Sorry, I didn't get that. Which item should I check?"
CATALOG_UNAVAILABLE_TEXT = "Sorry, I can't reach the inventory right now. Please try again later."


def _bullets(lines: List[str]) -> str:
    return "\n".join(f"• {line}" for line in lines)


class ResponseComposer:
    """Builds fulfillment text from StockResult objects"""

    def __init__(self, ambiguity_policy: str = 'primary'):
        self.ambiguity_policy = ambiguity_policy

    def help_text(self) -> str:
        return HELP_TEXT

    def fallback_text(self) -> str:
        return FALLBACK_TEXT

    def compose(self, result: StockResult) -> str:
        if result.error is ErrorKind.CATALOG_UNAVAILABLE:
            return CATALOG_UNAVAILABLE_TEXT
        if result.error is ErrorKind.LOCATION_NOT_FOUND:
            return f'Sorry, I couldn\'t find a store matching "{result.location_text}".'
        if result.error is ErrorKind.PRODUCT_NOT_FOUND:
            return self._product_not_found(result)
        if result.error in (ErrorKind.AMBIGUOUS_LOCATION, ErrorKind.AMBIGUOUS_PRODUCT):
            return self._ambiguous(result)

        if result.kind is ResultKind.MULTI_STORE:
            return self._multi_store(result)
        if result.kind is ResultKind.STORE_SUMMARY:
            return self._store_summary(result)
        if result.kind is ResultKind.LOW_STOCK_LIST:
            return self._low_stock_list(result)
        return self._item(result)

    def _product_not_found(self, result: StockResult) -> str:
        where = f" at {result.store.display_name}" if result.store else ""
        text = f'Sorry, I couldn\'t find "{result.product_text}"{where}.'
        if result.suggestions:
            return f"{text} You might like: {', '.join(result.suggestions)}."
        return f"{text} Want me to check similar items?"

    def _ambiguous(self, result: StockResult) -> str:
        if result.error is ErrorKind.AMBIGUOUS_LOCATION:
            what, text = "stores", result.location_text
        else:
            what, text = "products", result.product_text

        if self.ambiguity_policy == 'clarify' or result.fallback is None:
            return (f'I found several {what} matching "{text}":\n'
                    f"{_bullets(result.candidates)}\n"
                    "Which one did you mean?")
        return f"Assuming you meant {result.candidates[0]}. {self.compose(result.fallback)}"

    def _item(self, result: StockResult) -> str:
        item = result.item
        where = f" at {result.store.display_name}" if result.store else ""
        sku = item.sku or "-"
        if result.level is StockLevel.OUT_OF_STOCK:
            return (f"Sorry, {item.name} is currently out of stock{where}. "
                    "I can notify the supplier for restock.")
        if result.level is StockLevel.LOW_STOCK:
            return f"Yes, {item.name} (SKU: {sku}) is available{where}, but running low: only {item.qty} left."
        return f"Yes, {item.name} (SKU: {sku}) - {item.qty} in stock{where}."

    def _multi_store(self, result: StockResult) -> str:
        lines = []
        for e in result.entries:
            store = e.store.display_name if e.store else e.item.store_id
            lines.append(f"{store}: {e.item.qty} ({e.level.value})")
        return f"{result.item.name} is stocked at {len(result.entries)} stores:\n{_bullets(lines)}"

    def _store_summary(self, result: StockResult) -> str:
        store = result.store.display_name
        if not result.entries:
            return f"All {result.total_items} items at {store} are well stocked."
        lines = [f"{e.item.name} (qty {e.item.qty}, {e.level.value})" for e in result.entries]
        return f"Stock alerts at {store}:\n{_bullets(lines)}"

    def _low_stock_list(self, result: StockResult) -> str:
        where = f" at {result.store.display_name}" if result.store else ""
        if not result.entries:
            return f"All items{where} are healthy."
        lines = []
        for e in result.entries:
            at = "" if result.store or e.store is None else f" at {e.store.display_name}"
            lines.append(f"{e.item.name} (qty {e.item.qty}){at}")
        return f"Low stock items{where}:\n{_bullets(lines)}"
