from typing import Dict, FrozenSet, NamedTuple, Optional, Tuple


class OpSpec(NamedTuple):
    """How one opcode translates into an ``Operation``.

    Operands are resolved in the order inputs, fields, substacks; that is
    also the order of ``Operation.args``.
    """
    kind: str
    inputs: Tuple[str, ...] = ()
    fields: Tuple[str, ...] = ()
    substacks: Tuple[str, ...] = ()
    # Slots Scratch drops when they are left empty
    optional: FrozenSet[str] = frozenset()

    @property
    def slots(self) -> Tuple[str, ...]:
        return self.inputs + self.fields + self.substacks


def _op(kind: str, *inputs: str, fields: Tuple[str, ...] = (), substacks: Tuple[str, ...] = (),
        optional: Tuple[str, ...] = ()) -> OpSpec:
    return OpSpec(kind, tuple(inputs), fields, substacks, frozenset(optional) | frozenset(substacks))


# Mapping of opcodes to operator specs
OPERATORS: Dict[str, OpSpec] = {
    # Events
    "event_broadcast": _op("EventBroadcast", "BROADCAST_INPUT"),
    "event_broadcastandwait": _op("EventBroadcastAndWait", "BROADCAST_INPUT"),

    # Motion
    "motion_movesteps": _op("MotionMove", "STEPS"),
    "motion_turnright": _op("MotionTurnRight", "DEGREES"),
    "motion_turnleft": _op("MotionTurnLeft", "DEGREES"),
    "motion_goto": _op("MotionGoTo", "TO"),
    "motion_gotoxy": _op("MotionGoToXY", "X", "Y"),
    "motion_glideto": _op("MotionGlideTo", "SECS", "TO"),
    "motion_glidesecstoxy": _op("MotionGlideToXY", "SECS", "X", "Y"),
    "motion_pointindirection": _op("MotionPointInDirection", "DIRECTION"),
    "motion_pointtowards": _op("MotionPointTowards", "TOWARDS"),
    "motion_changexby": _op("MotionChangeX", "DX"),
    "motion_setx": _op("MotionSetX", "X"),
    "motion_changeyby": _op("MotionChangeY", "DY"),
    "motion_sety": _op("MotionSetY", "Y"),
    "motion_ifonedgebounce": _op("MotionBounceOnEdge"),
    "motion_setrotationstyle": _op("MotionSetRotationStyle", fields=("STYLE",)),
    "motion_xposition": _op("MotionXPosition"),
    "motion_yposition": _op("MotionYPosition"),
    "motion_direction": _op("MotionDirection"),

    # Looks
    "looks_sayforsecs": _op("LooksSayForSecs", "MESSAGE", "SECS"),
    "looks_say": _op("LooksSay", "MESSAGE"),
    "looks_thinkforsecs": _op("LooksThinkForSecs", "MESSAGE", "SECS"),
    "looks_think": _op("LooksThink", "MESSAGE"),
    "looks_switchcostumeto": _op("LooksSwitchCostume", "COSTUME"),
    "looks_nextcostume": _op("LooksNextCostume"),
    "looks_switchbackdropto": _op("LooksSwitchBackdrop", "BACKDROP"),
    "looks_nextbackdrop": _op("LooksNextBackdrop"),
    "looks_changesizeby": _op("LooksChangeSize", "CHANGE"),
    "looks_setsizeto": _op("LooksSetSize", "SIZE"),
    "looks_changeeffectby": _op("LooksChangeEffect", "CHANGE", fields=("EFFECT",)),
    "looks_seteffectto": _op("LooksSetEffect", "VALUE", fields=("EFFECT",)),
    "looks_cleargraphiceffects": _op("LooksClearEffects"),
    "looks_show": _op("LooksShow"),
    "looks_hide": _op("LooksHide"),
    "looks_gotofrontback": _op("LooksGoToLayer", fields=("FRONT_BACK",)),
    "looks_goforwardbackwardlayers": _op("LooksMoveLayers", "NUM", fields=("FORWARD_BACKWARD",)),
    "looks_costumenumbername": _op("LooksCostume", fields=("NUMBER_NAME",)),
    "looks_backdropnumbername": _op("LooksBackdrop", fields=("NUMBER_NAME",)),
    "looks_size": _op("LooksSize"),

    # Sound
    "sound_playuntildone": _op("SoundPlayUntilDone", "SOUND_MENU"),
    "sound_play": _op("SoundPlay", "SOUND_MENU"),
    "sound_stopallsounds": _op("SoundStopAll"),
    "sound_changevolumeby": _op("SoundChangeVolume", "VOLUME"),
    "sound_setvolumeto": _op("SoundSetVolume", "VOLUME"),
    "sound_cleareffects": _op("SoundClearEffects"),
    "sound_volume": _op("SoundVolume"),

    # Pen
    "pen_clear": _op("PenClear"),
    "pen_stamp": _op("PenStamp"),
    "pen_penDown": _op("PenDown"),
    "pen_penUp": _op("PenUp"),
    "pen_setPenColorToColor": _op("PenSetColor", "COLOR"),
    "pen_changePenColorParamBy": _op("PenChangeColorParam", "COLOR_PARAM", "VALUE"),
    "pen_setPenColorParamTo": _op("PenSetColorParam", "COLOR_PARAM", "VALUE"),
    "pen_changePenSizeBy": _op("PenChangeSize", "SIZE"),
    "pen_setPenSizeTo": _op("PenSetSize", "SIZE"),

    # Control
    "control_wait": _op("ControlWait", "DURATION"),
    "control_repeat": _op("ControlRepeat", "TIMES", substacks=("SUBSTACK",)),
    "control_forever": _op("ControlForever", substacks=("SUBSTACK",)),
    "control_if": _op("ControlIf", "CONDITION", substacks=("SUBSTACK",), optional=("CONDITION",)),
    "control_if_else": _op(
        "ControlIfElse", "CONDITION", substacks=("SUBSTACK", "SUBSTACK2"), optional=("CONDITION",)
    ),
    "control_wait_until": _op("ControlWaitUntil", "CONDITION", optional=("CONDITION",)),
    "control_repeat_until": _op(
        "ControlRepeatUntil", "CONDITION", substacks=("SUBSTACK",), optional=("CONDITION",)
    ),
    "control_while": _op("ControlWhile", "CONDITION", substacks=("SUBSTACK",), optional=("CONDITION",)),
    "control_stop": _op("ControlStop", fields=("STOP_OPTION",)),
    "control_create_clone_of": _op("ControlCreateClone", "CLONE_OPTION"),
    "control_delete_this_clone": _op("ControlDeleteClone"),

    # Sensing
    "sensing_touchingobject": _op("SensingTouching", "TOUCHINGOBJECTMENU"),
    "sensing_distanceto": _op("SensingDistanceTo", "DISTANCETOMENU"),
    "sensing_askandwait": _op("SensingAsk", "QUESTION"),
    "sensing_answer": _op("SensingAnswer"),
    "sensing_keypressed": _op("SensingKeyPressed", "KEY_OPTION"),
    "sensing_mousedown": _op("SensingMouseDown"),
    "sensing_mousex": _op("SensingMouseX"),
    "sensing_mousey": _op("SensingMouseY"),
    "sensing_timer": _op("SensingTimer"),
    "sensing_resettimer": _op("SensingResetTimer"),

    # Operators
    "operator_add": _op("OpAdd", "NUM1", "NUM2"),
    "operator_subtract": _op("OpSubtract", "NUM1", "NUM2"),
    "operator_multiply": _op("OpMultiply", "NUM1", "NUM2"),
    "operator_divide": _op("OpDivide", "NUM1", "NUM2"),
    "operator_mod": _op("OpMod", "NUM1", "NUM2"),
    "operator_random": _op("OpRandom", "FROM", "TO"),
    "operator_gt": _op("OpGreater", "OPERAND1", "OPERAND2"),
    "operator_lt": _op("OpLess", "OPERAND1", "OPERAND2"),
    "operator_equals": _op("OpEquals", "OPERAND1", "OPERAND2"),
    "operator_and": _op("OpAnd", "OPERAND1", "OPERAND2", optional=("OPERAND1", "OPERAND2")),
    "operator_or": _op("OpOr", "OPERAND1", "OPERAND2", optional=("OPERAND1", "OPERAND2")),
    "operator_not": _op("OpNot", "OPERAND", optional=("OPERAND",)),
    "operator_join": _op("OpJoin", "STRING1", "STRING2"),
    "operator_letter_of": _op("OpLetterOf", "LETTER", "STRING"),
    "operator_length": _op("OpLength", "STRING"),
    "operator_contains": _op("OpContains", "STRING1", "STRING2"),
    "operator_round": _op("OpRound", "NUM"),
    "operator_mathop": _op("OpMath", "NUM", fields=("OPERATOR",)),

    # Variables
    "data_setvariableto": _op("DataSetVariable", "VALUE", fields=("VARIABLE",)),
    "data_changevariableby": _op("DataChangeVariable", "VALUE", fields=("VARIABLE",)),
    "data_showvariable": _op("DataShowVariable", fields=("VARIABLE",)),
    "data_hidevariable": _op("DataHideVariable", fields=("VARIABLE",)),
    "data_addtolist": _op("DataAddToList", "ITEM", fields=("LIST",)),
    "data_deleteoflist": _op("DataDeleteOfList", "INDEX", fields=("LIST",)),
    "data_deletealloflist": _op("DataDeleteAllOfList", fields=("LIST",)),
    "data_insertatlist": _op("DataInsertAtList", "ITEM", "INDEX", fields=("LIST",)),
    "data_replaceitemoflist": _op("DataReplaceItemOfList", "INDEX", "ITEM", fields=("LIST",)),
    "data_itemoflist": _op("DataItemOfList", "INDEX", fields=("LIST",)),
    "data_itemnumoflist": _op("DataItemNumOfList", "ITEM", fields=("LIST",)),
    "data_lengthoflist": _op("DataLengthOfList", fields=("LIST",)),
    "data_listcontainsitem": _op("DataListContainsItem", "ITEM", fields=("LIST",)),
    "data_showlist": _op("DataShowList", fields=("LIST",)),
    "data_hidelist": _op("DataHideList", fields=("LIST",)),
}

# Normalize legacy/variant opcodes to the canonical names used above
OPCODE_NORMALIZATION: Dict[str, str] = {
    "pen_setpensizeto": "pen_setPenSizeTo",
    "pen_setpencolortocolor": "pen_setPenColorToColor",
    "pen_penup": "pen_penUp",
    "pen_pendown": "pen_penDown",
    "pen_setpenparamto": "pen_setPenColorParamTo",
    "pen_changepenparamby": "pen_changePenColorParamBy",
    "pen_changepensizeby": "pen_changePenSizeBy",
}

# Reporters that are nothing but a reference; they resolve to the reference itself
REFERENCE_REPORTERS: Dict[str, str] = {
    "data_variable": "VARIABLE",
    "data_listcontents": "LIST",
}

# Menu shadow blocks and the field holding the chosen option; they resolve to a literal
MENU_OPCODES: Dict[str, str] = {
    "motion_goto_menu": "TO",
    "motion_glideto_menu": "TO",
    "motion_pointtowards_menu": "TOWARDS",
    "looks_costume": "COSTUME",
    "looks_backdrops": "BACKDROP",
    "sound_sounds_menu": "SOUND_MENU",
    "pen_menu_colorParam": "colorParam",
    "sensing_keyoptions": "KEY_OPTION",
    "sensing_distancetomenu": "DISTANCETOMENU",
    "sensing_touchingobjectmenu": "TOUCHINGOBJECTMENU",
    "sensing_of_object_menu": "OBJECT",
    "control_create_clone_of_menu": "CLONE_OPTION",
}


def normalize_opcode(opcode: str) -> str:
    return OPCODE_NORMALIZATION.get(opcode, opcode)


def lookup_operator(opcode: str) -> Optional[OpSpec]:
    return OPERATORS.get(normalize_opcode(opcode))


def register_operator(opcode: str, spec: OpSpec) -> None:
    """Teach the resolver a new opcode; later registrations replace earlier ones."""
    OPERATORS[opcode] = spec
    KIND_SLOTS[spec.kind] = spec.slots


# Operator kind -> slot names, in ``Operation.args`` order
KIND_SLOTS: Dict[str, Tuple[str, ...]] = {spec.kind: spec.slots for spec in OPERATORS.values()}
